import asyncio
import sys
import os

# Aggiungi backend/ alla PYTHONPATH per importare invoice_app.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))

from invoice_app.core.config import get_settings
from invoice_app.core.database import build_engine
from invoice_app.models import Base

async def reset():
    engine = build_engine(get_settings())
    print("Connessione al database, eliminazione tabelle...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            print("Tabelle eliminate. Creazione nuove tabelle...")
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()
    print("Database resettato con successo!")

if __name__ == "__main__":
    asyncio.run(reset())
