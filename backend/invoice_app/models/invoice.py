"""
Modelli SQLAlchemy per la Fatturazione
Progetto: Invoice App (Gestionale Fatture)

Contiene:
- Invoice: Fattura principale
- InvoiceItem: Righe della fattura

NOTA: le colonne che puntano ad altre tabelle (sender_address_id,
client_address_id, invoice_id) NON dichiarano foreign key. L'integrità
referenziale e la cancellazione a cascata sono gestite dal service layer.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from invoice_app.models import Base
from invoice_app.models.mixins import IntegerIdMixin, TimestampMixin

# Stati ammessi per una fattura
INVOICE_STATUSES = ("draft", "pending", "paid")

_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class Invoice(Base, IntegerIdMixin, TimestampMixin):
    """
    Modello per le fatture.

    Invariante applicata in scrittura (non dallo schema): alla creazione
    la somma dei totali delle righe deve coincidere con il totale fattura
    entro la tolleranza configurata.

    Attributes:
        id: ID numerico, generato automaticamente
        payment_due: Data scadenza pagamento
        description: Descrizione libera
        payment_terms: Termini di pagamento (giorni)
        client_name: Nome del cliente
        client_email: Email del cliente
        status: Stato fattura (draft, pending, paid)
        total: Totale fattura
        sender_address_id: ID indirizzo mittente (opzionale)
        client_address_id: ID indirizzo cliente (opzionale)
        created_at: Data/ora creazione record
        updated_at: Data/ora ultimo aggiornamento
    """

    __tablename__ = "invoices"

    # ------------------------------------------------------------
    # Colonne Dati
    # ------------------------------------------------------------
    payment_due: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data scadenza pagamento",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Descrizione della fattura",
    )

    payment_terms: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Termini di pagamento in giorni",
    )

    client_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Nome del cliente",
    )

    client_email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Email del cliente",
    )

    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="draft",
        server_default="draft",
        doc="Stato: draft (bozza), pending (in attesa), paid (pagata)",
    )

    total: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Totale fattura",
    )

    # ------------------------------------------------------------
    # Colonne Riferimenti (senza foreign key)
    # ------------------------------------------------------------
    sender_address_id: Mapped[Optional[int]] = mapped_column(
        _ID_TYPE,
        nullable=True,
        doc="ID indirizzo mittente",
    )

    client_address_id: Mapped[Optional[int]] = mapped_column(
        _ID_TYPE,
        nullable=True,
        doc="ID indirizzo cliente",
    )

    # ------------------------------------------------------------
    # Indici e Vincoli
    # ------------------------------------------------------------
    __table_args__ = (
        Index("ix_invoices_client_email", "client_email"),
        Index("ix_invoices_created_at", "created_at"),
        Index("ix_invoices_payment_due", "payment_due"),
        Index("ix_invoices_sender_address", "sender_address_id"),
        Index("ix_invoices_client_address", "client_address_id"),
        CheckConstraint(
            "status IN ('draft', 'pending', 'paid')",
            name="ck_invoices_status_valid",
        ),
        CheckConstraint("total >= 0", name="ck_invoices_total_positive"),
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, status={self.status}, total={self.total})>"


class InvoiceItem(Base, IntegerIdMixin, TimestampMixin):
    """
    Modello per le righe della fattura.

    Ogni riga appartiene a una sola fattura e viene eliminata con essa.
    Il totale riga dovrebbe valere quantity * price, ma non viene
    ricalcolato: si salva il valore ricevuto.

    Attributes:
        id: ID numerico, generato automaticamente
        invoice_id: ID della fattura padre
        name: Descrizione della riga
        quantity: Quantità (intero positivo)
        price: Prezzo unitario
        total: Totale riga
    """

    __tablename__ = "invoice_items"

    invoice_id: Mapped[int] = mapped_column(
        _ID_TYPE,
        nullable=False,
        doc="ID della fattura padre",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Descrizione della riga",
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Quantità",
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Prezzo unitario",
    )

    total: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Totale riga",
    )

    __table_args__ = (
        Index("ix_invoice_items_invoice_id", "invoice_id"),
        CheckConstraint("quantity > 0", name="ck_invoice_items_quantity_positive"),
        CheckConstraint("price > 0", name="ck_invoice_items_price_positive"),
        CheckConstraint("total > 0", name="ck_invoice_items_total_positive"),
    )

    def __repr__(self) -> str:
        return f"<InvoiceItem(id={self.id}, invoice_id={self.invoice_id}, total={self.total})>"
