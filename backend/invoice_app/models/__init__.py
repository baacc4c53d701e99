"""
Modelli Database SQLAlchemy
Progetto: Invoice App (Gestionale Fatture)

Import centralizzato di tutti i modelli per create_all e usage generico.

Modelli:
- Address: Indirizzi postali (mittente/cliente) referenziati dalle fatture
- Invoice: Fatture
- InvoiceItem: Righe fattura
"""

# SQLAlchemy 2.0 Base declarativa
# Importato qui per essere disponibile per tutti i modelli
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class per tutti i modelli SQLAlchemy."""
    pass


# Import modelli implementati
from invoice_app.models.address import Address
from invoice_app.models.invoice import Invoice, InvoiceItem

# Esportazione di tutti i modelli
__all__ = [
    "Base",
    "Address",
    "Invoice",
    "InvoiceItem",
]
