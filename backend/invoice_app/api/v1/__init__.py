"""
API v1 Routes
Progetto: Invoice App (Gestionale Fatture)

Router versione 1 dell'API.
"""

from fastapi import APIRouter

from invoice_app.api.v1 import addresses, invoices

# Router aggregato per v1
api_v1_router = APIRouter(prefix="/api/v1")

# Includi i router dei moduli
api_v1_router.include_router(invoices.router)
api_v1_router.include_router(addresses.router)

# Esportazione
__all__ = ["api_v1_router"]
