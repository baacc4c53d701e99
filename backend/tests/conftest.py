"""
Pytest configuration and fixtures for Invoice App tests.

- mock_db: AsyncSession mock per i test unitari dei controlli
- run_db: esegue uno scenario async su un database SQLite temporaneo
- client: TestClient FastAPI collegato allo stesso database temporaneo
"""

import asyncio
import copy
from typing import Any, Awaitable, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from invoice_app.core.config import Settings
from invoice_app.core.database import build_engine, build_session_factory, create_tables
from invoice_app.main import create_app


# ============================================================
# Fixtures per AsyncSession Mock
# ============================================================


@pytest.fixture
def mock_db():
    """Crea un mock di AsyncSession."""
    db = AsyncMock(spec=AsyncSession)
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    return db


# ============================================================
# Dati di esempio
# ============================================================


INVOICE_PAYLOAD = {
    "paymentDue": "2024-09-30",
    "description": "Sviluppo sito web",
    "paymentTerms": 30,
    "clientName": "Mario Rossi",
    "clientEmail": "mario.rossi@azienda.it",
    "status": "pending",
    "total": 250.0,
    "senderAddress": {
        "street": "Via Roma 1",
        "city": "Milano",
        "postCode": "20100",
        "country": "Italia",
    },
    "clientAddress": {
        "street": "Corso Vittorio Emanuele 10",
        "city": "Torino",
        "postCode": "10121",
        "country": "Italia",
    },
    "items": [
        {"name": "Progettazione", "quantity": 1, "price": 100.0, "total": 100.0},
        {"name": "Sviluppo", "quantity": 3, "price": 50.0, "total": 150.0},
    ],
}


@pytest.fixture
def invoice_payload() -> Callable[..., dict]:
    """
    Factory di payload JSON (camelCase) per la creazione fattura.

    Le righe sommano 250.00, pari al totale di default.
    """

    def _make(**overrides) -> dict:
        payload = copy.deepcopy(INVOICE_PAYLOAD)
        payload.update(overrides)
        return payload

    return _make


# ============================================================
# Fixtures per database SQLite temporaneo
# ============================================================


@pytest.fixture
def database_url(tmp_path) -> str:
    """URL di un database SQLite su file, isolato per ogni test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'invoices.db'}"


@pytest.fixture
def test_settings(database_url) -> Settings:
    return Settings(
        database_url=database_url,
        db_create_tables=True,
        app_env="testing",
    )


@pytest.fixture
def run_db(test_settings):
    """
    Esegue uno scenario async su un database SQLite temporaneo.

    Lo scenario riceve la session factory. Engine e tabelle vengono
    creati all'interno dello stesso event loop dello scenario; i dati
    restano sul file tra una chiamata e l'altra dello stesso test.

    Usage:
        async def scenario(session_factory):
            async with session_factory() as db:
                ...
        result = run_db(scenario)
    """

    def _run(
        scenario: Callable[[async_sessionmaker[AsyncSession]], Awaitable[Any]],
    ) -> Any:
        async def _main():
            engine = build_engine(test_settings)
            try:
                await create_tables(engine)
                return await scenario(build_session_factory(engine))
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run


@pytest.fixture
def client(test_settings):
    """TestClient con lifespan attivo sul database temporaneo."""
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client
