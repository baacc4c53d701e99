"""
Main Entry Point - FastAPI Application
Progetto: Invoice App (Gestionale Fatture)

Configura l'applicazione FastAPI con middleware, router e lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from invoice_app.api import api_v1_router
from invoice_app.core.config import Settings, get_settings
from invoice_app.core.database import close_db, init_db
from invoice_app.core.exceptions import AppException

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Exception Handlers
# ------------------------------------------------------------
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Gestore per le eccezioni applicative.

    Usa lo status code della classe: 404 per NotFoundError,
    400 per BusinessValidationError e ReferentialIntegrityError.
    """
    if exc.status_code >= 500:
        logger.error("Errore applicativo: %s", exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error_code": exc.error_code,
            "extra": exc.extra,
        },
    )


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Gestore per errori di validazione dell'input.

    Converte l'eccezione in risposta HTTP 400 (bad request).
    """
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Dati della richiesta non validi",
            "error_code": "REQUEST_VALIDATION_ERROR",
            "extra": {"errors": jsonable_encoder(exc.errors())},
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Gestore generico per tutte le eccezioni non catturate.

    Converte l'eccezione in risposta HTTP 500 e logga l'errore.
    """
    logger.error(
        "Unhandled exception su %s %s: %s",
        request.method, request.url.path, exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Errore interno del server"},
    )


# ------------------------------------------------------------
# Application Factory
# ------------------------------------------------------------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Crea e configura l'applicazione FastAPI.

    Args:
        settings: Impostazioni da usare (default: get_settings())

    Returns:
        FastAPI: Applicazione configurata
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Gestisce il ciclo di vita dell'applicazione.

        - Startup: crea il pool di connessioni al database
        - Shutdown: chiude le connessioni database
        """
        logger.info(f"Avvio {settings.app_name} v{settings.app_version}")
        await init_db(app, settings)
        logger.info("Applicazione avviata con successo")

        yield

        logger.info("Arresto applicazione in corso...")
        await close_db(app)
        logger.info("Applicazione arrestata")

    app = FastAPI(
        title=settings.app_name,
        description="Gestione fatture, righe e indirizzi - Backend API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Le dependency che leggono le impostazioni usano quelle dell'app
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get(
        "/health",
        name="Health Check",
        summary="Controlla lo stato dell'applicazione",
        tags=["System"],
    )
    async def health_check() -> dict[str, str]:
        """Endpoint per il controllo dello stato di salute."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
        }

    app.include_router(api_v1_router)

    return app


app = create_app()
