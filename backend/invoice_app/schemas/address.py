"""
Schemas Pydantic per l'entità Address
Progetto: Invoice App (Gestionale Fatture)
"""

import datetime

from pydantic import Field

from invoice_app.schemas.base import CamelModel


class AddressBase(CamelModel):
    """Schema base per gli indirizzi."""

    street: str = Field(..., min_length=1, max_length=255, description="Via e numero civico")
    city: str = Field(..., min_length=1, max_length=100, description="Città")
    post_code: str = Field(..., min_length=1, max_length=20, description="CAP / codice postale")
    country: str = Field(..., min_length=1, max_length=100, description="Paese")


class AddressCreate(AddressBase):
    """Schema per la creazione di un indirizzo (insieme alla fattura)."""
    pass


class AddressRead(AddressBase):
    """Schema per la lettura di un indirizzo."""

    id: int = Field(..., description="ID indirizzo")
    created_at: datetime.datetime = Field(..., description="Data/ora creazione")
    updated_at: datetime.datetime = Field(..., description="Data/ora ultimo aggiornamento")


class AddressCleanupResult(CamelModel):
    """Esito della pulizia degli indirizzi non referenziati."""

    deleted_count: int = Field(..., ge=0, description="Numero di indirizzi eliminati")
