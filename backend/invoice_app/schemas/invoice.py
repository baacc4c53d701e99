"""
Schemas Pydantic per la Fatturazione
Progetto: Invoice App (Gestionale Fatture)

Contiene:
- Enums: InvoiceStatus, InvoiceSortField, SortOrder
- Schemas per InvoiceItem
- Schemas per Invoice (creazione, aggiornamento, lettura, lista, dettaglio)
- Schemas per statistiche e import da JSON
"""

import datetime
import re
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from invoice_app.core.exceptions import BusinessValidationError
from invoice_app.schemas.address import AddressCreate, AddressRead
from invoice_app.schemas.base import MAX_AMOUNT, MAX_INT, CamelModel, Money

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# -------------------------------------------------------------------
# Enum
# -------------------------------------------------------------------

class InvoiceStatus(str, Enum):
    """Stati ammessi per una fattura."""
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"


class InvoiceSortField(str, Enum):
    """Campi ammessi per l'ordinamento della lista fatture."""
    CREATED_AT = "createdAt"
    PAYMENT_DUE = "paymentDue"
    TOTAL = "total"


class SortOrder(str, Enum):
    """Direzione di ordinamento."""
    ASC = "asc"
    DESC = "desc"


# -------------------------------------------------------------------
# Schemas per InvoiceItem
# -------------------------------------------------------------------

class InvoiceItemBase(CamelModel):
    """Schema base per le righe della fattura."""

    name: str = Field(..., min_length=1, max_length=255, description="Descrizione della riga")
    quantity: int = Field(..., gt=0, le=MAX_INT, description="Quantità")
    price: Money = Field(..., gt=0, le=MAX_AMOUNT, description="Prezzo unitario")
    total: Money = Field(..., gt=0, le=MAX_AMOUNT, description="Totale riga")


class InvoiceItemCreate(InvoiceItemBase):
    """Schema per la creazione di una riga fattura."""
    pass


class InvoiceItemRead(InvoiceItemBase):
    """Schema per la lettura di una riga fattura."""

    id: int = Field(..., description="ID della riga")
    invoice_id: int = Field(..., description="ID della fattura")
    created_at: datetime.datetime = Field(..., description="Data/ora creazione")
    updated_at: datetime.datetime = Field(..., description="Data/ora ultimo aggiornamento")


# -------------------------------------------------------------------
# Schemas per Invoice
# -------------------------------------------------------------------

class InvoiceCreate(CamelModel):
    """
    Schema per la creazione di una fattura completa.

    Include i due indirizzi (mittente e cliente) e almeno una riga.
    La coerenza tra somma righe e totale è verificata dal service,
    all'interno della transazione di creazione.
    """

    payment_due: datetime.date = Field(..., description="Data scadenza (YYYY-MM-DD)")
    description: str = Field(..., min_length=1, description="Descrizione")
    payment_terms: int = Field(..., gt=0, le=MAX_INT, description="Termini di pagamento (giorni)")
    client_name: str = Field(..., min_length=1, max_length=255, description="Nome cliente")
    client_email: EmailStr = Field(..., description="Email cliente")
    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT, description="Stato fattura")
    total: Money = Field(..., gt=0, le=MAX_AMOUNT, description="Totale fattura")
    sender_address: AddressCreate = Field(..., description="Indirizzo mittente")
    client_address: AddressCreate = Field(..., description="Indirizzo cliente")
    items: list[InvoiceItemCreate] = Field(..., min_length=1, description="Righe fattura")

    @field_validator("payment_due", mode="before")
    @classmethod
    def validate_payment_due_format(cls, v: Any) -> Any:
        """Accetta solo date nel formato YYYY-MM-DD."""
        if isinstance(v, datetime.date):
            return v
        if not isinstance(v, str) or not _ISO_DATE_RE.match(v):
            raise ValueError("Formato data non valido (atteso YYYY-MM-DD)")
        return v


class InvoiceCreated(CamelModel):
    """Esito della creazione: ID della fattura e dei due indirizzi."""

    id: int
    sender_address_id: int
    client_address_id: int


class InvoiceUpdate(CamelModel):
    """
    Schema per l'aggiornamento parziale di una fattura.

    Vengono applicati solo i campi presenti nella richiesta.
    sender_address_id e client_address_id possono essere impostati
    esplicitamente a null per scollegare l'indirizzo.
    """

    status: Optional[InvoiceStatus] = None
    description: Optional[str] = Field(None, min_length=1)
    payment_terms: Optional[int] = Field(None, gt=0, le=MAX_INT)
    client_name: Optional[str] = Field(None, min_length=1, max_length=255)
    client_email: Optional[EmailStr] = None
    total: Optional[Money] = Field(None, gt=0, le=MAX_AMOUNT)
    sender_address_id: Optional[int] = Field(None, gt=0)
    client_address_id: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def validate_explicit_nulls(self) -> "InvoiceUpdate":
        """Solo i riferimenti agli indirizzi ammettono null esplicito."""
        nullable = {"sender_address_id", "client_address_id"}
        for name in self.model_fields_set - nullable:
            if getattr(self, name) is None:
                raise BusinessValidationError(f"Il campo '{name}' non può essere null")
        return self

    def changes(self) -> dict[str, Any]:
        """Restituisce solo i campi presenti nella richiesta."""
        return self.model_dump(exclude_unset=True)


class InvoiceRead(CamelModel):
    """Schema per la lettura di una fattura (riga della tabella invoices)."""

    id: int = Field(..., description="ID fattura")
    payment_due: datetime.date
    description: str
    payment_terms: int
    client_name: str
    client_email: str
    status: InvoiceStatus
    total: Money
    sender_address_id: Optional[int] = None
    client_address_id: Optional[int] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class InvoiceListEntry(CamelModel):
    """Elemento della lista fatture: fattura con indirizzo mittente."""

    invoice: InvoiceRead
    sender_address: Optional[AddressRead] = None


class InvoiceDetail(InvoiceRead):
    """Fattura completa di righe e indirizzi (null se non presenti)."""

    items: list[InvoiceItemRead] = Field(default_factory=list)
    sender_address: Optional[AddressRead] = None
    client_address: Optional[AddressRead] = None


class InvoiceDeleteResult(CamelModel):
    """Esito della cancellazione di una fattura."""

    success: bool = True


# -------------------------------------------------------------------
# Schemas per Report
# -------------------------------------------------------------------

class InvoiceStatusStats(CamelModel):
    """Conteggio e importo totale delle fatture in un certo stato."""

    count: int = Field(..., ge=0, description="Numero di fatture")
    total_amount: Money = Field(..., description="Somma dei totali")


# -------------------------------------------------------------------
# Import da JSON
# -------------------------------------------------------------------

class _ImportAddress(BaseModel):
    street: str
    city: str
    postCode: str
    country: str


class _ImportItem(BaseModel):
    name: str
    quantity: float
    price: float
    total: float


class InvoiceImport(BaseModel):
    """
    Formato JSON "grezzo" delle fatture (es. dati di esempio del frontend).

    Controlla solo i tipi; i vincoli di dominio sono applicati da
    InvoiceCreate in transform_json_to_create. Campi aggiuntivi
    (id, createdAt, ...) vengono ignorati.
    """

    paymentDue: str
    description: str
    paymentTerms: float
    clientName: str
    clientEmail: str
    status: InvoiceStatus
    total: float
    senderAddress: _ImportAddress
    clientAddress: _ImportAddress
    items: list[_ImportItem]


def transform_json_to_create(json_data: Any) -> InvoiceCreate:
    """
    Converte una fattura in formato JSON nello schema di creazione.

    Args:
        json_data: Oggetto JSON già decodificato (dict)

    Returns:
        InvoiceCreate: Dati pronti per InvoiceService.create

    Raises:
        pydantic.ValidationError: tipi o vincoli non rispettati
    """
    data = InvoiceImport.model_validate(json_data)
    return InvoiceCreate.model_validate(data.model_dump())
