"""
Tests per InvoiceService e AddressService.

Gli scenari girano su un database SQLite temporaneo (fixture run_db):
si verificano le scritture effettive, la cascata manuale e il rollback.
"""

import logging
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from invoice_app.core.exceptions import (
    BusinessValidationError,
    NotFoundError,
    ReferentialIntegrityError,
)
from invoice_app.models import Address, Invoice, InvoiceItem
from invoice_app.schemas.invoice import (
    InvoiceCreate,
    InvoiceItemCreate,
    InvoiceSortField,
    InvoiceStatus,
    InvoiceUpdate,
    SortOrder,
)
from invoice_app.services.address_service import AddressService
from invoice_app.services.invoice_service import InvoiceService


async def count_rows(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar()


async def create_invoice(session_factory, payload: dict, service=None):
    service = service or InvoiceService()
    async with session_factory() as db:
        return await service.create(db, InvoiceCreate.model_validate(payload))


# ============================================================
# Tests for create
# ============================================================


class TestCreateInvoice:
    """Tests per la creazione di una fattura completa."""

    def test_create_writes_addresses_invoice_and_items(self, run_db, invoice_payload):
        """Test creazione: 2 indirizzi, 1 fattura, N righe."""

        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                invoice = await db.get(Invoice, created.id)
                return (
                    created,
                    invoice,
                    await count_rows(db, Address),
                    await count_rows(db, InvoiceItem),
                )

        created, invoice, addresses, items = run_db(scenario)

        assert created.sender_address_id != created.client_address_id
        assert invoice.sender_address_id == created.sender_address_id
        assert invoice.client_address_id == created.client_address_id
        assert invoice.status == "pending"
        assert invoice.total == Decimal("250.00")
        assert addresses == 2
        assert items == 2

    def test_total_mismatch_writes_nothing(self, run_db, invoice_payload):
        """Test righe 100 + 150 con totale 260: errore e nessuna scrittura."""

        async def scenario(session_factory):
            with pytest.raises(BusinessValidationError) as exc_info:
                await create_invoice(session_factory, invoice_payload(total=260))
            async with session_factory() as db:
                return (
                    exc_info.value,
                    await count_rows(db, Address),
                    await count_rows(db, Invoice),
                    await count_rows(db, InvoiceItem),
                )

        error, addresses, invoices, items = run_db(scenario)

        assert error.status_code == 400
        assert error.extra == {"itemsTotal": 250.0, "invoiceTotal": 260.0}
        assert (addresses, invoices, items) == (0, 0, 0)

    def test_total_within_tolerance(self, run_db, invoice_payload):
        """Test scarto di 0.01 ammesso."""

        async def scenario(session_factory):
            return await create_invoice(session_factory, invoice_payload(total=250.01))

        assert run_db(scenario).id > 0

    def test_custom_tolerance(self, run_db, invoice_payload):
        """Test tolleranza configurabile sul service."""

        async def scenario(session_factory):
            service = InvoiceService(amount_tolerance=Decimal("0"))
            with pytest.raises(BusinessValidationError):
                await create_invoice(session_factory, invoice_payload(total=250.01), service)

        run_db(scenario)

    def test_failure_after_flush_rolls_back(self, run_db, invoice_payload):
        """Test errore sulle righe dopo il flush di indirizzi e fattura: nessuna scrittura."""

        async def scenario(session_factory):
            data = InvoiceCreate.model_validate(invoice_payload())
            # Riga che supera la validazione ma viola ck_invoice_items_quantity_positive
            data.items[1] = InvoiceItemCreate.model_construct(
                name="Sviluppo", quantity=-1, price=Decimal("50"), total=Decimal("150")
            )
            async with session_factory() as db:
                with pytest.raises(IntegrityError):
                    await InvoiceService().create(db, data)
            async with session_factory() as db:
                return (
                    await count_rows(db, Address),
                    await count_rows(db, Invoice),
                    await count_rows(db, InvoiceItem),
                )

        assert run_db(scenario) == (0, 0, 0)


# ============================================================
# Tests for get_by_id / get_all / get_stats
# ============================================================


class TestReadInvoices:
    """Tests per le letture."""

    def test_get_by_id_with_items_and_addresses(self, run_db, invoice_payload):
        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                return await InvoiceService().get_by_id(db, created.id)

        detail = run_db(scenario)

        assert [item.name for item in detail.items] == ["Progettazione", "Sviluppo"]
        assert detail.sender_address.city == "Milano"
        assert detail.client_address.city == "Torino"

    def test_get_by_id_not_found(self, run_db):
        async def scenario(session_factory):
            async with session_factory() as db:
                with pytest.raises(NotFoundError):
                    await InvoiceService().get_by_id(db, 999)

        run_db(scenario)

    def test_orphan_address_reads_as_none(self, run_db, invoice_payload, caplog):
        """Test indirizzo referenziato ma eliminato: None e warning nel log."""

        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                await db.execute(delete(Address).where(Address.id == created.sender_address_id))
                await db.commit()
            async with session_factory() as db:
                return await InvoiceService().get_by_id(db, created.id)

        with caplog.at_level(logging.WARNING, logger="invoice_app.services.invoice_service"):
            detail = run_db(scenario)

        assert detail.sender_address is None
        assert detail.client_address is not None
        assert "Riferimento orfano" in caplog.text

    def test_list_sorted_by_total_asc(self, run_db, invoice_payload):
        async def scenario(session_factory):
            for total in (250, 100, 175):
                items = [{"name": "Riga", "quantity": 1, "price": total, "total": total}]
                await create_invoice(session_factory, invoice_payload(total=total, items=items))
            async with session_factory() as db:
                return await InvoiceService().get_all(
                    db, sort_by=InvoiceSortField.TOTAL, sort_order=SortOrder.ASC
                )

        entries = run_db(scenario)

        assert [entry.invoice.total for entry in entries] == [
            Decimal("100.00"),
            Decimal("175.00"),
            Decimal("250.00"),
        ]
        assert all(entry.sender_address.city == "Milano" for entry in entries)

    def test_list_filter_and_pagination(self, run_db, invoice_payload):
        async def scenario(session_factory):
            for status in ("draft", "paid", "paid", "paid"):
                await create_invoice(session_factory, invoice_payload(status=status))
            async with session_factory() as db:
                service = InvoiceService()
                paid = await service.get_all(db, status_filter=InvoiceStatus.PAID)
                page = await service.get_all(db, limit=2, offset=1, status_filter=InvoiceStatus.PAID)
                return paid, page

        paid, page = run_db(scenario)

        assert len(paid) == 3
        assert all(entry.invoice.status == InvoiceStatus.PAID for entry in paid)
        assert [entry.invoice.id for entry in page] == [entry.invoice.id for entry in paid[1:3]]

    def test_list_without_sender_address(self, run_db, invoice_payload):
        """Test fattura senza mittente: presente in lista con sender_address None."""

        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                await InvoiceService().update(
                    db, created.id, InvoiceUpdate.model_validate({"senderAddressId": None})
                )
            async with session_factory() as db:
                return await InvoiceService().get_all(db)

        entries = run_db(scenario)

        assert len(entries) == 1
        assert entries[0].sender_address is None

    def test_stats_only_present_statuses(self, run_db, invoice_payload):
        async def scenario(session_factory):
            await create_invoice(session_factory, invoice_payload(status="paid"))
            await create_invoice(session_factory, invoice_payload(status="paid"))
            await create_invoice(session_factory, invoice_payload(status="draft"))
            async with session_factory() as db:
                return await InvoiceService().get_stats(db)

        stats = run_db(scenario)

        assert set(stats) == {"paid", "draft"}
        assert stats["paid"].count == 2
        assert stats["paid"].total_amount == Decimal("500.00")
        assert stats["draft"].count == 1

    def test_stats_empty(self, run_db):
        async def scenario(session_factory):
            async with session_factory() as db:
                return await InvoiceService().get_stats(db)

        assert run_db(scenario) == {}


# ============================================================
# Tests for update
# ============================================================


class TestUpdateInvoice:
    """Tests per l'aggiornamento parziale."""

    def test_update_fields(self, run_db, invoice_payload):
        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                data = InvoiceUpdate.model_validate({"status": "paid", "total": 999.999})
                return await InvoiceService().update(db, created.id, data)

        invoice = run_db(scenario)

        assert invoice.status == "paid"
        assert invoice.total == Decimal("1000.00")
        assert invoice.description == "Sviluppo sito web"

    def test_update_missing_invoice(self, run_db):
        """Test aggiornamento di una fattura inesistente: errore di integrità."""

        async def scenario(session_factory):
            async with session_factory() as db:
                with pytest.raises(ReferentialIntegrityError) as exc_info:
                    await InvoiceService().update(
                        db, 999, InvoiceUpdate.model_validate({"status": "paid"})
                    )
            return exc_info.value

        assert run_db(scenario).entity == "invoice"

    def test_update_missing_address(self, run_db, invoice_payload):
        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                with pytest.raises(ReferentialIntegrityError) as exc_info:
                    await InvoiceService().update(
                        db, created.id, InvoiceUpdate.model_validate({"clientAddressId": 999})
                    )
            async with session_factory() as db:
                return exc_info.value, await db.get(Invoice, created.id), created

        error, invoice, created = run_db(scenario)

        assert error.entity == "client address"
        assert invoice.client_address_id == created.client_address_id


# ============================================================
# Tests for delete
# ============================================================


class TestDeleteInvoice:
    """Tests per la cancellazione con cascata manuale."""

    def test_delete_removes_items_and_unused_addresses(self, run_db, invoice_payload):
        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                result = await InvoiceService().delete(db, created.id)
            async with session_factory() as db:
                return (
                    result,
                    await count_rows(db, Invoice),
                    await count_rows(db, InvoiceItem),
                    await count_rows(db, Address),
                )

        result, invoices, items, addresses = run_db(scenario)

        assert result.success is True
        assert (invoices, items, addresses) == (0, 0, 0)

    def test_delete_keeps_shared_address(self, run_db, invoice_payload):
        """Test un indirizzo usato da un'altra fattura non viene eliminato."""

        async def scenario(session_factory):
            service = InvoiceService()
            first = await create_invoice(session_factory, invoice_payload())
            second = await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                await service.update(
                    db,
                    second.id,
                    InvoiceUpdate.model_validate({"senderAddressId": first.sender_address_id}),
                )
            async with session_factory() as db:
                await service.delete(db, first.id)
            async with session_factory() as db:
                result = await db.execute(select(Address.id))
                return first, second, set(result.scalars().all())

        first, second, remaining = run_db(scenario)

        assert first.sender_address_id in remaining
        assert first.client_address_id not in remaining
        # Il vecchio mittente della seconda fattura resta orfano
        assert remaining == {
            first.sender_address_id,
            second.sender_address_id,
            second.client_address_id,
        }

    def test_failure_after_items_delete_rolls_back(self, run_db, invoice_payload):
        """Test errore dopo l'eliminazione delle righe: fattura, righe e indirizzi intatti."""
        original_execute = AsyncSession.execute
        statements = []

        async def failing_execute(self, statement, *args, **kwargs):
            statements.append(statement)
            # 1: select fattura, 2: delete righe, 3: delete fattura
            if len(statements) == 3:
                raise RuntimeError("Errore simulato durante la cancellazione")
            return await original_execute(self, statement, *args, **kwargs)

        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                with patch.object(AsyncSession, "execute", failing_execute):
                    with pytest.raises(RuntimeError):
                        await InvoiceService().delete(db, created.id)
            async with session_factory() as db:
                return (
                    await count_rows(db, Invoice),
                    await count_rows(db, InvoiceItem),
                    await count_rows(db, Address),
                )

        assert run_db(scenario) == (1, 2, 2)

    def test_delete_missing_invoice(self, run_db):
        async def scenario(session_factory):
            async with session_factory() as db:
                with pytest.raises(ReferentialIntegrityError):
                    await InvoiceService().delete(db, 999)

        run_db(scenario)


# ============================================================
# Tests for add_item
# ============================================================


class TestAddItem:
    """Tests per l'aggiunta di una riga."""

    def test_add_item_keeps_invoice_total(self, run_db, invoice_payload):
        """Test il totale fattura non viene ricalcolato."""

        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            item = InvoiceItemCreate(name="Hosting", quantity=2, price=Decimal("10"), total=Decimal("20"))
            async with session_factory() as db:
                new_item = await InvoiceService().add_item(db, created.id, item)
            async with session_factory() as db:
                return new_item, await InvoiceService().get_by_id(db, created.id)

        new_item, detail = run_db(scenario)

        assert new_item.invoice_id == detail.id
        assert new_item.total == Decimal("20.00")
        assert len(detail.items) == 3
        assert detail.total == Decimal("250.00")

    def test_add_item_missing_invoice(self, run_db):
        async def scenario(session_factory):
            item = InvoiceItemCreate(name="Hosting", quantity=1, price=Decimal("10"), total=Decimal("10"))
            async with session_factory() as db:
                with pytest.raises(ReferentialIntegrityError):
                    await InvoiceService().add_item(db, 999, item)
                return await count_rows(db, InvoiceItem)

        assert run_db(scenario) == 0


# ============================================================
# Tests for AddressService.cleanup_unused
# ============================================================


class TestCleanupAddresses:
    """Tests per la pulizia degli indirizzi orfani."""

    def test_cleanup_is_idempotent(self, run_db, invoice_payload):
        async def scenario(session_factory):
            created = await create_invoice(session_factory, invoice_payload())
            await create_invoice(session_factory, invoice_payload())
            async with session_factory() as db:
                await InvoiceService().update(
                    db, created.id, InvoiceUpdate.model_validate({"clientAddressId": None})
                )
            async with session_factory() as db:
                first = await AddressService().cleanup_unused(db)
            async with session_factory() as db:
                second = await AddressService().cleanup_unused(db)
                return first, second, await count_rows(db, Address)

        first, second, addresses = run_db(scenario)

        assert first.deleted_count == 1
        assert second.deleted_count == 0
        assert addresses == 3
