"""
Router FastAPI per gli Indirizzi
Progetto: Invoice App (Gestionale Fatture)

Endpoint di manutenzione degli indirizzi.
"""

from fastapi import APIRouter, status

from invoice_app.core.deps import AddressServiceDep, DbSession
from invoice_app.schemas.address import AddressCleanupResult

router = APIRouter(
    prefix="/addresses",
    tags=["Indirizzi"],
)


@router.post(
    "/cleanup",
    name="pulizia_indirizzi",
    summary="Elimina indirizzi orfani",
    description="Elimina tutti gli indirizzi non referenziati da alcuna fattura.",
    response_model=AddressCleanupResult,
    status_code=status.HTTP_200_OK,
)
async def cleanup_addresses(
    db: DbSession,
    address_service: AddressServiceDep,
) -> AddressCleanupResult:
    """
    Manutenzione: nessuna modalità di simulazione, gli indirizzi
    orfani vengono eliminati immediatamente.
    """
    return await address_service.cleanup_unused(db=db)
