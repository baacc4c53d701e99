"""
Controlli di integrità referenziale
Progetto: Invoice App (Gestionale Fatture)

Lo schema non dichiara foreign key tra fatture, righe e indirizzi:
queste funzioni verificano i riferimenti prima di ogni scrittura.
Vanno chiamate con la stessa sessione (e quindi nella stessa
transazione) dell'operazione che proteggono.
"""

import logging
from typing import Literal, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from invoice_app.core.exceptions import ReferentialIntegrityError
from invoice_app.models import Address, Invoice

# Logger per questo modulo
logger = logging.getLogger(__name__)

AddressRole = Literal["sender", "client"]

_ROLE_LABELS = {"sender": "mittente", "client": "cliente"}


async def address_exists(
    db: AsyncSession,
    address_id: Optional[int],
    role: AddressRole,
) -> None:
    """
    Verifica che l'indirizzo referenziato esista.

    Nessun controllo se address_id è None (riferimento scollegato).

    Raises:
        ReferentialIntegrityError: indirizzo inesistente
    """
    if address_id is None:
        return

    result = await db.execute(
        select(Address.id).where(Address.id == address_id).limit(1)
    )
    if result.scalar_one_or_none() is None:
        raise ReferentialIntegrityError(
            f"{role} address",
            address_id,
            f"Indirizzo {_ROLE_LABELS[role]} con ID {address_id} inesistente",
        )


async def invoice_exists(db: AsyncSession, invoice_id: int) -> None:
    """
    Verifica che la fattura referenziata esista.

    Raises:
        ReferentialIntegrityError: fattura inesistente
    """
    result = await db.execute(
        select(Invoice.id).where(Invoice.id == invoice_id).limit(1)
    )
    if result.scalar_one_or_none() is None:
        raise ReferentialIntegrityError(
            "invoice",
            invoice_id,
            f"Fattura con ID {invoice_id} inesistente",
        )


async def address_in_use(db: AsyncSession, address_id: int) -> bool:
    """
    True se almeno una fattura usa l'indirizzo come mittente o cliente.
    """
    result = await db.execute(
        select(func.count())
        .select_from(Invoice)
        .where(
            or_(
                Invoice.sender_address_id == address_id,
                Invoice.client_address_id == address_id,
            )
        )
    )
    usage = result.scalar() or 0
    logger.debug("Indirizzo %s referenziato da %s fatture", address_id, usage)
    return usage > 0
