"""
Import fatture da file JSON
Progetto: Invoice App (Gestionale Fatture)

Legge un file JSON (una fattura o una lista di fatture) e crea
ogni fattura nel database configurato.

Usage:
    python import_invoices.py data.json
"""

import argparse
import asyncio
import json
import logging
import os
import sys

# Aggiungi backend/ alla PYTHONPATH per importare invoice_app.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))

from invoice_app.core.config import get_settings
from invoice_app.core.database import build_engine, build_session_factory
from invoice_app.services.import_service import ImportSummary, import_invoices
from invoice_app.services.invoice_service import InvoiceService


async def run(records: list) -> ImportSummary:
    settings = get_settings()
    engine = build_engine(settings)
    try:
        return await import_invoices(
            build_session_factory(engine),
            InvoiceService(amount_tolerance=settings.amount_tolerance),
            records,
        )
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Importa fatture da un file JSON")
    parser.add_argument("path", help="File JSON con una fattura o una lista di fatture")
    args = parser.parse_args()

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    with open(args.path, encoding="utf-8") as f:
        payload = json.load(f)
    records = payload if isinstance(payload, list) else [payload]

    summary = asyncio.run(run(records))
    print(f"Import completato: {summary.imported} importate, {len(summary.skipped)} scartate")


if __name__ == "__main__":
    main()
