"""
Dependency Injection per router e service
Progetto: Invoice App (Gestionale Fatture)

Funzioni di dependency injection per sessione database e service.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invoice_app.core.config import Settings, get_settings
from invoice_app.core.database import get_db
from invoice_app.services.address_service import AddressService
from invoice_app.services.invoice_service import InvoiceService


def get_invoice_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InvoiceService:
    """
    Dependency per ottenere il service delle fatture.

    La tolleranza sui totali viene letta dalle impostazioni, così
    che i test possano sostituirla con `app.dependency_overrides`.
    """
    return InvoiceService(amount_tolerance=settings.amount_tolerance)


def get_address_service() -> AddressService:
    """Dependency per ottenere il service degli indirizzi."""
    return AddressService()


# Type aliases per uso comune
DbSession = Annotated[AsyncSession, Depends(get_db)]
InvoiceServiceDep = Annotated[InvoiceService, Depends(get_invoice_service)]
AddressServiceDep = Annotated[AddressService, Depends(get_address_service)]


# Export
__all__ = [
    "get_invoice_service",
    "get_address_service",
    "DbSession",
    "InvoiceServiceDep",
    "AddressServiceDep",
]
