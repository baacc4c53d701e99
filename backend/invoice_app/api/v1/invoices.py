"""
Router FastAPI per la Fatturazione
Progetto: Invoice App (Gestionale Fatture)

Definisce gli endpoint API per la gestione delle fatture:
operazioni CRUD, aggiunta righe e statistiche.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Path, Query, status

from invoice_app.core.deps import DbSession, InvoiceServiceDep
from invoice_app.schemas.invoice import (
    InvoiceCreate,
    InvoiceCreated,
    InvoiceDeleteResult,
    InvoiceDetail,
    InvoiceItemCreate,
    InvoiceItemRead,
    InvoiceListEntry,
    InvoiceRead,
    InvoiceSortField,
    InvoiceStatus,
    InvoiceStatusStats,
    InvoiceUpdate,
    SortOrder,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)

# Router con prefix e tag
router = APIRouter(
    prefix="/invoices",
    tags=["Fatturazione"],
)


# -------------------------------------------------------------------
# Endpoints per Fatture
# -------------------------------------------------------------------

@router.post(
    "/",
    name="crea_fattura",
    summary="Crea fattura",
    description="Crea una fattura con indirizzo mittente, indirizzo cliente e righe.",
    response_model=InvoiceCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    data: InvoiceCreate,
    db: DbSession,
    invoice_service: InvoiceServiceDep,
) -> InvoiceCreated:
    """
    Crea una fattura completa.

    La somma dei totali riga deve coincidere con il totale fattura
    (tolleranza 0.01), altrimenti la richiesta viene rifiutata con 400
    e nessun dato viene salvato.
    """
    return await invoice_service.create(db=db, data=data)


@router.get(
    "/",
    name="fatture_lista",
    summary="Lista fatture",
    description="Recupera una pagina di fatture con indirizzo mittente.",
    response_model=list[InvoiceListEntry],
    status_code=status.HTTP_200_OK,
)
async def get_invoices(
    db: DbSession,
    invoice_service: InvoiceServiceDep,
    limit: int = Query(10, ge=1, le=100, description="Elementi per pagina"),
    offset: int = Query(0, ge=0, description="Elementi da saltare"),
    status_filter: Optional[InvoiceStatus] = Query(
        None,
        alias="status",
        description="Filtro per stato (draft, pending, paid)",
    ),
    sort_by: InvoiceSortField = Query(
        InvoiceSortField.CREATED_AT,
        alias="sortBy",
        description="Campo di ordinamento (createdAt, paymentDue, total)",
    ),
    sort_order: SortOrder = Query(
        SortOrder.DESC,
        alias="sortOrder",
        description="Direzione di ordinamento (asc, desc)",
    ),
) -> list[InvoiceListEntry]:
    """
    Recupera la lista delle fatture.

    Il conteggio totale non viene restituito.
    """
    return await invoice_service.get_all(
        db=db,
        limit=limit,
        offset=offset,
        status_filter=status_filter,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get(
    "/stats",
    name="fatture_statistiche",
    summary="Statistiche fatture",
    description="Numero di fatture e importo totale per ciascuno stato.",
    response_model=dict[str, InvoiceStatusStats],
    status_code=status.HTTP_200_OK,
)
async def get_invoice_stats(
    db: DbSession,
    invoice_service: InvoiceServiceDep,
) -> dict[str, InvoiceStatusStats]:
    """Gli stati senza fatture non compaiono nella risposta."""
    return await invoice_service.get_stats(db=db)


@router.get(
    "/{invoice_id}",
    name="fattura_dettaglio",
    summary="Dettaglio fattura",
    description="Recupera una fattura con righe e indirizzi.",
    response_model=InvoiceDetail,
    status_code=status.HTTP_200_OK,
)
async def get_invoice(
    db: DbSession,
    invoice_service: InvoiceServiceDep,
    invoice_id: int = Path(..., gt=0, description="ID della fattura"),
) -> InvoiceDetail:
    return await invoice_service.get_by_id(db=db, invoice_id=invoice_id)


@router.patch(
    "/{invoice_id}",
    name="aggiorna_fattura",
    summary="Aggiorna fattura",
    description="Aggiorna i campi presenti nella richiesta.",
    response_model=InvoiceRead,
    status_code=status.HTTP_200_OK,
)
async def update_invoice(
    data: InvoiceUpdate,
    db: DbSession,
    invoice_service: InvoiceServiceDep,
    invoice_id: int = Path(..., gt=0, description="ID della fattura"),
) -> InvoiceRead:
    """
    Aggiorna una fattura.

    Campi modificabili: status, description, paymentTerms, clientName,
    clientEmail, total, senderAddressId, clientAddressId.
    Gli ID indirizzo possono essere impostati a null per scollegarli.

    NOTA: la coerenza tra righe e totale non viene ricontrollata.
    """
    return await invoice_service.update(db=db, invoice_id=invoice_id, data=data)


@router.delete(
    "/{invoice_id}",
    name="elimina_fattura",
    summary="Elimina fattura",
    description="Elimina fattura, righe e indirizzi non più utilizzati.",
    response_model=InvoiceDeleteResult,
    status_code=status.HTTP_200_OK,
)
async def delete_invoice(
    db: DbSession,
    invoice_service: InvoiceServiceDep,
    invoice_id: int = Path(..., gt=0, description="ID della fattura"),
) -> InvoiceDeleteResult:
    """
    Elimina una fattura.

    Effetti:
    - Le righe della fattura vengono eliminate
    - Gli indirizzi mittente/cliente vengono eliminati solo se
      nessun'altra fattura li utilizza
    """
    return await invoice_service.delete(db=db, invoice_id=invoice_id)


# -------------------------------------------------------------------
# Endpoints per Righe Fattura
# -------------------------------------------------------------------

@router.post(
    "/{invoice_id}/items",
    name="aggiungi_riga_fattura",
    summary="Aggiungi riga",
    description="Aggiunge una riga a una fattura esistente.",
    response_model=InvoiceItemRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_invoice_item(
    item: InvoiceItemCreate,
    db: DbSession,
    invoice_service: InvoiceServiceDep,
    invoice_id: int = Path(..., gt=0, description="ID della fattura"),
) -> InvoiceItemRead:
    """
    Aggiunge una riga.

    NOTA: il totale della fattura non viene aggiornato né verificato.
    """
    return await invoice_service.add_item(db=db, invoice_id=invoice_id, item=item)
