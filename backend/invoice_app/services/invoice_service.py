"""
Service Layer per la Fatturazione
Progetto: Invoice App (Gestionale Fatture)

Definisce la logica di business per la gestione delle fatture,
delle righe e degli indirizzi collegati.

Le operazioni di scrittura sono eseguite in un'unica transazione:
in caso di errore non resta alcuna scrittura parziale. Le letture
interrogano direttamente il database.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from invoice_app.core.database import transaction
from invoice_app.core.exceptions import (
    BusinessValidationError,
    NotFoundError,
    ReferentialIntegrityError,
)
from invoice_app.models import Address, Invoice, InvoiceItem
from invoice_app.schemas.address import AddressRead
from invoice_app.schemas.base import to_fixed
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
from invoice_app.services.integrity import (
    address_exists,
    address_in_use,
    invoice_exists,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)

# Colonne ammesse per l'ordinamento della lista
_SORT_COLUMNS = {
    InvoiceSortField.CREATED_AT: Invoice.created_at,
    InvoiceSortField.PAYMENT_DUE: Invoice.payment_due,
    InvoiceSortField.TOTAL: Invoice.total,
}


class InvoiceService:
    """
    Service per la gestione delle operazioni sulle fatture.

    Fornisce metodi asincroni per interagire con il database
    in modo centralizzato, senza dipendenze da FastAPI.

    Implementa:
    - Creazione fattura con indirizzi e righe in un'unica transazione
    - Verifica coerenza tra somma righe e totale fattura
    - Cancellazione a cascata manuale (righe + indirizzi non più usati)
    - Lista paginata con filtro per stato e ordinamento
    - Statistiche per stato
    """

    def __init__(self, amount_tolerance: Decimal = Decimal("0.01")) -> None:
        """
        Args:
            amount_tolerance: Scarto massimo tra somma righe e totale fattura
        """
        self.amount_tolerance = amount_tolerance

    async def create(
        self,
        db: AsyncSession,
        data: InvoiceCreate,
    ) -> InvoiceCreated:
        """
        Crea una fattura completa di indirizzi e righe.

        Steps (tutti nella stessa transazione):
        1. Verifica che la somma dei totali riga coincida con il totale
           fattura entro la tolleranza
        2. Crea indirizzo mittente e indirizzo cliente
        3. Crea la fattura collegata ai due indirizzi
        4. Crea le righe collegate alla fattura

        Args:
            db: Sessione database
            data: Dati della fattura

        Returns:
            InvoiceCreated: ID della fattura e dei due indirizzi

        Raises:
            BusinessValidationError: somma righe diversa dal totale
        """
        async with transaction(db):
            # Step 1: Verifica coerenza totali
            calculated_total = sum((item.total for item in data.items), Decimal("0"))
            if abs(calculated_total - data.total) > self.amount_tolerance:
                raise BusinessValidationError(
                    f"La somma delle righe ({to_fixed(calculated_total)}) non corrisponde "
                    f"al totale fattura ({to_fixed(data.total)})",
                    extra={
                        "itemsTotal": float(to_fixed(calculated_total)),
                        "invoiceTotal": float(to_fixed(data.total)),
                    },
                )

            # Step 2: Crea indirizzi
            sender_address = Address(**data.sender_address.model_dump())
            client_address = Address(**data.client_address.model_dump())
            db.add_all([sender_address, client_address])
            await db.flush()  # Genera gli ID degli indirizzi

            # Step 3: Crea fattura
            invoice = Invoice(
                payment_due=data.payment_due,
                description=data.description,
                payment_terms=data.payment_terms,
                client_name=data.client_name,
                client_email=str(data.client_email),
                status=data.status.value,
                total=to_fixed(data.total),
                sender_address_id=sender_address.id,
                client_address_id=client_address.id,
            )
            db.add(invoice)
            await db.flush()  # Genera invoice.id

            # Step 4: Crea righe
            db.add_all([self._build_item(invoice.id, item) for item in data.items])
            await db.flush()

        logger.info(
            "Fattura %s creata (%s righe, totale %s)",
            invoice.id, len(data.items), invoice.total,
        )
        return InvoiceCreated(
            id=invoice.id,
            sender_address_id=sender_address.id,
            client_address_id=client_address.id,
        )

    @staticmethod
    def _build_item(invoice_id: int, item: InvoiceItemCreate) -> InvoiceItem:
        """Crea il modello InvoiceItem con importi arrotondati a 2 decimali."""
        return InvoiceItem(
            invoice_id=invoice_id,
            name=item.name,
            quantity=item.quantity,
            price=to_fixed(item.price),
            total=to_fixed(item.total),
        )

    async def get_all(
        self,
        db: AsyncSession,
        limit: int = 10,
        offset: int = 0,
        status_filter: Optional[InvoiceStatus] = None,
        sort_by: InvoiceSortField = InvoiceSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> list[InvoiceListEntry]:
        """
        Recupera una pagina di fatture con il relativo indirizzo mittente.

        Le fatture senza indirizzo mittente (o con riferimento orfano)
        sono comunque restituite, con sender_address a None.
        Non restituisce il conteggio totale.

        Args:
            db: Sessione database
            limit: Numero massimo di elementi (1-100)
            offset: Elementi da saltare
            status_filter: Filtro per stato
            sort_by: Campo di ordinamento
            sort_order: Direzione di ordinamento

        Returns:
            list[InvoiceListEntry]: Pagina di fatture
        """
        stmt = select(Invoice, Address).outerjoin(
            Address, Invoice.sender_address_id == Address.id
        )

        if status_filter is not None:
            stmt = stmt.where(Invoice.status == InvoiceStatus(status_filter).value)

        sort_column = _SORT_COLUMNS[InvoiceSortField(sort_by)]
        if SortOrder(sort_order) == SortOrder.ASC:
            stmt = stmt.order_by(sort_column.asc(), Invoice.id.asc())
        else:
            stmt = stmt.order_by(sort_column.desc(), Invoice.id.desc())

        stmt = stmt.limit(limit).offset(offset)

        result = await db.execute(stmt)
        return [
            InvoiceListEntry(
                invoice=InvoiceRead.model_validate(invoice),
                sender_address=(
                    AddressRead.model_validate(address) if address is not None else None
                ),
            )
            for invoice, address in result.all()
        ]

    async def get_by_id(
        self,
        db: AsyncSession,
        invoice_id: int,
    ) -> InvoiceDetail:
        """
        Recupera una fattura con righe e indirizzi.

        Un indirizzo referenziato ma non più presente viene segnalato
        nel log e restituito come None, senza far fallire la richiesta.

        Args:
            db: Sessione database
            invoice_id: ID della fattura

        Returns:
            InvoiceDetail: La fattura con righe e indirizzi

        Raises:
            NotFoundError: Fattura non trovata
        """
        result = await db.execute(select(Invoice).where(Invoice.id == invoice_id))
        invoice = result.scalar_one_or_none()

        if not invoice:
            raise NotFoundError(f"Fattura {invoice_id} non trovata")

        sender_address = await self._load_address(
            db, invoice, invoice.sender_address_id, "mittente"
        )
        client_address = await self._load_address(
            db, invoice, invoice.client_address_id, "cliente"
        )

        items_result = await db.execute(
            select(InvoiceItem)
            .where(InvoiceItem.invoice_id == invoice_id)
            .order_by(InvoiceItem.id.asc())
        )
        items = items_result.scalars().all()

        return InvoiceDetail(
            **InvoiceRead.model_validate(invoice).model_dump(),
            items=[InvoiceItemRead.model_validate(item) for item in items],
            sender_address=sender_address,
            client_address=client_address,
        )

    @staticmethod
    async def _load_address(
        db: AsyncSession,
        invoice: Invoice,
        address_id: Optional[int],
        role_label: str,
    ) -> Optional[AddressRead]:
        """Carica un indirizzo della fattura; None se assente o orfano."""
        if address_id is None:
            return None

        result = await db.execute(select(Address).where(Address.id == address_id))
        address = result.scalar_one_or_none()
        if address is None:
            logger.warning(
                "Riferimento orfano: la fattura %s punta all'indirizzo %s %s inesistente",
                invoice.id, role_label, address_id,
            )
            return None
        return AddressRead.model_validate(address)

    async def update(
        self,
        db: AsyncSession,
        invoice_id: int,
        data: InvoiceUpdate,
    ) -> Invoice:
        """
        Aggiorna i campi presenti nella richiesta.

        Gli ID indirizzo, se presenti e non null, devono esistere.
        La coerenza tra righe e totale NON viene ricontrollata.

        Args:
            db: Sessione database
            invoice_id: ID della fattura
            data: Campi da aggiornare

        Returns:
            Invoice: La fattura aggiornata

        Raises:
            ReferentialIntegrityError: fattura o indirizzo inesistente
        """
        changes = data.changes()

        async with transaction(db):
            await invoice_exists(db, invoice_id)

            if "sender_address_id" in changes:
                await address_exists(db, changes["sender_address_id"], "sender")
            if "client_address_id" in changes:
                await address_exists(db, changes["client_address_id"], "client")

            invoice = await db.get(Invoice, invoice_id)
            for field, value in changes.items():
                if field == "total":
                    value = to_fixed(value)
                elif field == "status":
                    value = InvoiceStatus(value).value
                elif field == "client_email":
                    value = str(value)
                setattr(invoice, field, value)

        logger.info(
            "Fattura %s aggiornata (campi: %s)",
            invoice_id, ", ".join(sorted(changes)) or "nessuno",
        )
        return invoice

    async def delete(
        self,
        db: AsyncSession,
        invoice_id: int,
    ) -> InvoiceDeleteResult:
        """
        Elimina una fattura con cascata manuale.

        Ordine (nella stessa transazione):
        1. Elimina le righe della fattura
        2. Elimina la fattura
        3. Elimina gli indirizzi mittente/cliente non più usati
           da altre fatture (controllo eseguito dopo il punto 2)

        Args:
            db: Sessione database
            invoice_id: ID della fattura

        Returns:
            InvoiceDeleteResult: Esito (success=True)

        Raises:
            ReferentialIntegrityError: fattura inesistente
        """
        removed_addresses = []

        async with transaction(db):
            result = await db.execute(select(Invoice).where(Invoice.id == invoice_id))
            invoice = result.scalar_one_or_none()

            if invoice is None:
                raise ReferentialIntegrityError(
                    "invoice", invoice_id, "Fattura non trovata"
                )

            address_ids = (invoice.sender_address_id, invoice.client_address_id)

            await db.execute(delete(InvoiceItem).where(InvoiceItem.invoice_id == invoice_id))
            await db.execute(delete(Invoice).where(Invoice.id == invoice_id))

            for address_id in address_ids:
                if address_id is None or address_id in removed_addresses:
                    continue
                if not await address_in_use(db, address_id):
                    await db.execute(delete(Address).where(Address.id == address_id))
                    removed_addresses.append(address_id)

        logger.info(
            "Fattura %s eliminata (indirizzi rimossi: %s)",
            invoice_id, removed_addresses or "nessuno",
        )
        return InvoiceDeleteResult(success=True)

    async def add_item(
        self,
        db: AsyncSession,
        invoice_id: int,
        item: InvoiceItemCreate,
    ) -> InvoiceItem:
        """
        Aggiunge una riga a una fattura esistente.

        Il totale della fattura non viene ricalcolato né confrontato
        con la nuova somma delle righe.

        Args:
            db: Sessione database
            invoice_id: ID della fattura
            item: Dati della riga

        Returns:
            InvoiceItem: La riga creata

        Raises:
            ReferentialIntegrityError: fattura inesistente
        """
        async with transaction(db):
            await invoice_exists(db, invoice_id)

            new_item = self._build_item(invoice_id, item)
            db.add(new_item)
            await db.flush()

        logger.info("Riga %s aggiunta alla fattura %s", new_item.id, invoice_id)
        return new_item

    async def get_stats(
        self,
        db: AsyncSession,
    ) -> dict[str, InvoiceStatusStats]:
        """
        Raggruppa le fatture per stato.

        Gli stati senza fatture non compaiono nel risultato.

        Returns:
            dict: stato -> {count, totalAmount}
        """
        result = await db.execute(
            select(
                Invoice.status,
                func.count(Invoice.id),
                func.sum(Invoice.total),
            ).group_by(Invoice.status)
        )

        return {
            status: InvoiceStatusStats(
                count=count,
                total_amount=to_fixed(total_amount or Decimal("0")),
            )
            for status, count, total_amount in result.all()
        }
