"""
API Routes
Progetto: Invoice App (Gestionale Fatture)

Modulo per l'aggregazione dei router versionati.
"""

from invoice_app.api.v1 import api_v1_router

# Esportazione router
__all__ = ["api_v1_router"]
