"""
Schemas Pydantic per il progetto Invoice App

Questo modulo contiene tutti gli schemi Pydantic utilizzati per la validazione
e serializzazione delle richieste e delle risposte API.
"""

# Import degli schemi per renderli disponibili tramite import diretto
# es: from invoice_app.schemas import InvoiceCreate, AddressRead, etc.

from invoice_app.schemas.base import CamelModel, Money, to_fixed
from invoice_app.schemas.address import (
    AddressBase,
    AddressCleanupResult,
    AddressCreate,
    AddressRead,
)
from invoice_app.schemas.invoice import (
    InvoiceStatus,
    InvoiceSortField,
    SortOrder,
    InvoiceItemBase,
    InvoiceItemCreate,
    InvoiceItemRead,
    InvoiceCreate,
    InvoiceCreated,
    InvoiceUpdate,
    InvoiceRead,
    InvoiceListEntry,
    InvoiceDetail,
    InvoiceDeleteResult,
    InvoiceStatusStats,
    InvoiceImport,
    transform_json_to_create,
)

__all__ = [
    "CamelModel",
    "Money",
    "to_fixed",
    "AddressBase",
    "AddressCleanupResult",
    "AddressCreate",
    "AddressRead",
    "InvoiceStatus",
    "InvoiceSortField",
    "SortOrder",
    "InvoiceItemBase",
    "InvoiceItemCreate",
    "InvoiceItemRead",
    "InvoiceCreate",
    "InvoiceCreated",
    "InvoiceUpdate",
    "InvoiceRead",
    "InvoiceListEntry",
    "InvoiceDetail",
    "InvoiceDeleteResult",
    "InvoiceStatusStats",
    "InvoiceImport",
    "transform_json_to_create",
]
