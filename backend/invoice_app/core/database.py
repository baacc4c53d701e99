"""
Configurazione Database - SQLAlchemy 2.0 Async
Progetto: Invoice App (Gestionale Fatture)

Definisce engine, session factory e dependency injection per FastAPI.

L'engine (e il relativo pool di connessioni) viene creato una sola volta
allo startup dell'applicazione, salvato in `app.state` e chiuso allo
shutdown. Gli handler lo ricevono tramite la dependency `get_db`.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from fastapi import FastAPI, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from invoice_app.core.config import Settings
from invoice_app.models import Base

# Logger per questo modulo
logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Engine Async SQLAlchemy 2.0
# ------------------------------------------------------------
def build_engine(settings: Settings) -> AsyncEngine:
    """
    Crea l'engine async a partire dalle impostazioni.

    Per SQLite (sviluppo/test) non vengono passati i parametri del pool,
    non supportati da tutti i pool SQLite.

    Args:
        settings: Impostazioni applicazione

    Returns:
        AsyncEngine: Engine configurato
    """
    pool_args = {}
    if not settings.is_sqlite:
        pool_args = {
            "pool_pre_ping": True,
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
        }

    return create_async_engine(
        settings.database_url,
        echo=settings.debug,  # Log query in modalità debug
        **pool_args,
    )


# ------------------------------------------------------------
# Session Factory
# ------------------------------------------------------------
def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Crea la factory di sessioni legata all'engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency injection per FastAPI.

    Crea una sessione database per ogni richiesta usando la factory
    registrata allo startup e la chiude automaticamente al termine.

    Yields:
        AsyncSession: Sessione database async

    Example:
        @router.get("/invoices")
        async def get_invoices(db: AsyncSession = Depends(get_db)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Esegue un blocco di scritture come unità atomica.

    Commit a fine blocco; rollback e rilancio dell'eccezione originale
    in caso di errore, senza lasciare scritture parziali.

    Example:
        async with transaction(db):
            db.add(address)
            await db.flush()
    """
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise


async def create_tables(engine: AsyncEngine) -> None:
    """Crea le tabelle mancanti (sviluppo/test, in produzione usare migrazioni)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db(app: FastAPI, settings: Settings) -> None:
    """
    Inizializza la connessione al database.

    Crea engine e session factory, li registra in `app.state` ed esegue
    un test di connessione per verificare che il database sia raggiungibile.
    """
    engine = build_engine(settings)
    try:
        async with engine.begin() as conn:
            # Test connessione
            await conn.execute(text("SELECT 1"))
        logger.info("Connessione al database stabilita con successo")
    except Exception as e:
        logger.error("Errore connessione database: %s", e)
        await engine.dispose()
        raise

    if settings.db_create_tables:
        await create_tables(engine)
        logger.info("Tabelle database create/verificate")

    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)


async def close_db(app: FastAPI) -> None:
    """
    Chiude le connessioni al database.

    Da chiamare durante lo shutdown dell'applicazione.
    """
    engine: AsyncEngine | None = getattr(app.state, "engine", None)
    if engine is not None:
        await engine.dispose()
        logger.info("Connessioni database chiuse")
