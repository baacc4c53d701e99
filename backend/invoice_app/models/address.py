"""
Modello SQLAlchemy per l'entità Address
Progetto: Invoice App (Gestionale Fatture)

Rappresenta gli indirizzi postali usati dalle fatture come
indirizzo mittente o indirizzo cliente.
"""


from __future__ import annotations

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from invoice_app.models import Base
from invoice_app.models.mixins import IntegerIdMixin, TimestampMixin


class Address(Base, IntegerIdMixin, TimestampMixin):
    """
    Modello per gli indirizzi postali.

    Un indirizzo può essere referenziato da più fatture, sia come
    mittente sia come cliente. Non esiste una foreign key sulle fatture:
    un indirizzo viene eliminato solo quando nessuna fattura lo usa
    (controllo eseguito dal service al momento della cancellazione).

    Attributes:
        id: ID numerico, generato automaticamente
        street: Via e numero civico
        city: Città
        post_code: CAP / codice postale
        country: Paese
        created_at: Data/ora creazione record
        updated_at: Data/ora ultimo aggiornamento
    """

    __tablename__ = "addresses"

    # ------------------------------------------------------------
    # Colonne Indirizzo
    # ------------------------------------------------------------
    street: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Via e numero civico",
    )

    city: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Città",
    )

    post_code: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="CAP / codice postale",
    )

    country: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Paese",
    )

    __table_args__ = (
        Index("ix_addresses_city_country", "city", "country"),
    )

    def __repr__(self) -> str:
        return f"<Address(id={self.id}, city={self.city}, country={self.country})>"
