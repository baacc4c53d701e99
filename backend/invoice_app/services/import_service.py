"""
Import fatture da JSON
Progetto: Invoice App (Gestionale Fatture)

Crea fatture a partire dal formato JSON dei dati di esempio del
frontend. Ogni fattura viene creata nella propria transazione: una
fattura non valida viene scartata senza bloccare le successive.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from invoice_app.core.exceptions import AppException
from invoice_app.schemas.invoice import transform_json_to_create
from invoice_app.services.invoice_service import InvoiceService

# Logger per questo modulo
logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    """Esito dell'import: ID creati e posizioni (1-based) scartate."""

    created_ids: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.created_ids)


async def import_invoices(
    session_factory: async_sessionmaker[AsyncSession],
    service: InvoiceService,
    records: list[Any],
) -> ImportSummary:
    """
    Importa una lista di fatture in formato JSON.

    Args:
        session_factory: Factory di sessioni (una sessione per fattura)
        service: Service usato per la creazione
        records: Fatture già decodificate dal JSON

    Returns:
        ImportSummary: ID creati e posizioni scartate
    """
    summary = ImportSummary()

    for index, record in enumerate(records, start=1):
        try:
            data = transform_json_to_create(record)
        except ValidationError as e:
            logger.warning("Fattura #%s scartata (formato non valido): %s", index, e)
            summary.skipped.append(index)
            continue

        async with session_factory() as db:
            try:
                created = await service.create(db, data)
            except AppException as e:
                logger.warning("Fattura #%s scartata: %s", index, e.detail)
                summary.skipped.append(index)
                continue

        logger.info("Fattura #%s importata con ID %s", index, created.id)
        summary.created_ids.append(created.id)

    return summary
