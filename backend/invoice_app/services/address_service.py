"""
Service Layer per l'entità Address
Progetto: Invoice App (Gestionale Fatture)

Manutenzione degli indirizzi: gli indirizzi vengono creati insieme
alle fatture e possono restare orfani (es. dopo uno scollegamento
tramite aggiornamento della fattura).
"""

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from invoice_app.core.database import transaction
from invoice_app.models import Address, Invoice
from invoice_app.schemas.address import AddressCleanupResult

# Logger per questo modulo
logger = logging.getLogger(__name__)


class AddressService:
    """Service per le operazioni di manutenzione sugli indirizzi."""

    async def cleanup_unused(self, db: AsyncSession) -> AddressCleanupResult:
        """
        Elimina in blocco tutti gli indirizzi non referenziati da alcuna fattura.

        Un indirizzo è orfano se il LEFT JOIN verso le fatture (come
        mittente o come cliente) non produce alcuna riga fattura.

        Args:
            db: Sessione database

        Returns:
            AddressCleanupResult: Numero di indirizzi eliminati
        """
        async with transaction(db):
            result = await db.execute(
                select(Address.id)
                .outerjoin(
                    Invoice,
                    or_(
                        Address.id == Invoice.sender_address_id,
                        Address.id == Invoice.client_address_id,
                    ),
                )
                .where(Invoice.id.is_(None))
            )
            unused_ids = list(result.scalars().all())

            if unused_ids:
                await db.execute(delete(Address).where(Address.id.in_(unused_ids)))

        logger.info("Pulizia indirizzi: %s indirizzi orfani eliminati", len(unused_ids))
        return AddressCleanupResult(deleted_count=len(unused_ids))
