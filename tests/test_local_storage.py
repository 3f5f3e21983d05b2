import asyncio
import json

import pytest

from conftest import add_customer, sheet_with_entries
from localretail.core.exceptions import AlreadyClosedError, BackendError
from localretail.schemas.company import CompanySettings
from localretail.schemas.product import Product
from localretail.schemas.transaction import Transaction, TransactionType
from localretail.services.sheet_close_service import SheetCloseService
from localretail.storage.local_storage import LocalStorage


def read_document(storage, key):
    with open(storage.path / f"{key}.json", encoding="utf-8") as fh:
        return json.load(fh)


async def test_records_are_stored_in_native_shape(local_storage):
    await local_storage.create_product(Product(id="PRD-MILK", name="Milk 1L", default_price=25))

    document = read_document(local_storage, "sales_app_products")

    assert document[0]["id"] == "PRD-MILK"
    assert document[0]["defaultPrice"] == 25
    assert "createdAt" in document[0]


async def test_customer_counter_is_persisted(local_storage):
    await add_customer(local_storage)
    await add_customer(local_storage)

    assert read_document(local_storage, "sales_app_customer_counter") == 100002

    reopened = LocalStorage(local_storage.path)
    assert await reopened.next_customer_id() == "100003"


async def test_atomic_block_is_discarded_on_error(local_storage):
    await local_storage.create_product(Product(id="PRD-MILK", name="Milk 1L", default_price=25))

    with pytest.raises(RuntimeError):
        async with local_storage.atomic():
            await local_storage.update_product("PRD-MILK", {"default_price": 30})
            # reads inside the block see the pending write
            assert (await local_storage.get_product("PRD-MILK")).default_price == 30
            raise RuntimeError("abort")

    assert (await local_storage.get_product("PRD-MILK")).default_price == 25


async def test_atomic_block_is_written_once_on_success(local_storage):
    async with local_storage.atomic():
        await local_storage.create_product(Product(id="PRD-MILK", name="Milk 1L", default_price=25))
        assert not (local_storage.path / "sales_app_products.json").exists()

    assert read_document(local_storage, "sales_app_products")[0]["name"] == "Milk 1L"


async def test_duplicate_invoice_number_is_rejected(local_storage):
    customer = await add_customer(local_storage)
    payment = Transaction(
        id="TXN-1",
        customer_id=customer.id,
        customer_name=customer.name,
        type=TransactionType.PAYMENT,
        invoice_number="PAY-MANUAL-100001-1-abc",
    )
    await local_storage.create_transaction(payment)

    with pytest.raises(BackendError):
        await local_storage.create_transaction(payment.model_copy(update={"id": "TXN-2"}))


async def test_corrupt_document_raises_backend_error(local_storage):
    (local_storage.path / "sales_app_products.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(BackendError) as exc_info:
        await local_storage.list_products()

    assert "sales_app_products" in exc_info.value.operation


async def test_invalid_record_raises_backend_error(local_storage):
    (local_storage.path / "sales_app_products.json").write_text(
        json.dumps([{"id": "PRD-X", "name": "Broken", "defaultPrice": -4}]), encoding="utf-8"
    )

    with pytest.raises(BackendError):
        await local_storage.list_products()


async def test_company_settings_round_trip(local_storage):
    assert (await local_storage.get_company_settings()).company_name == ""

    await local_storage.save_company_settings(CompanySettings(company_name="Sunrise Dairy", phone="080-1234"))

    saved = await local_storage.get_company_settings()
    assert saved.company_name == "Sunrise Dairy"
    assert saved.phone == "080-1234"


# ---------- concurrent writers ----------

async def closing_sheet(storage):
    milk = await storage.create_product(Product(id="PRD-MILK", name="Milk 1L", default_price=25))
    customer = await add_customer(storage)
    sheet = await sheet_with_entries(
        storage,
        deliveries={customer.id: {milk.id: (2, 50)}},
        payments={customer.id: (50, 0, 50)},
    )
    return customer, sheet


async def test_registration_during_close_is_kept(local_storage):
    customer, sheet = await closing_sheet(local_storage)
    posting_started = asyncio.Event()
    update_sheet = local_storage.update_sheet

    async def slow_update_sheet(sheet_id, changes):
        # the close is mid-unit: invoices and balances are buffered, not yet written
        posting_started.set()
        await asyncio.sleep(0.05)
        await update_sheet(sheet_id, changes)

    local_storage.update_sheet = slow_update_sheet

    async def register_late():
        await posting_started.wait()
        return await add_customer(local_storage, name="Late")

    result, late = await asyncio.gather(
        SheetCloseService(local_storage).close_sheet(sheet.id),
        register_late(),
    )

    customers = {c.id: c for c in await local_storage.list_customers()}
    assert sorted(customers) == [customer.id, late.id]
    assert customers[late.id].name == "Late"
    assert len(result.invoice_numbers) == 1
    assert len(await local_storage.list_invoices()) == 1


async def test_concurrent_closes_post_once(local_storage):
    _, sheet = await closing_sheet(local_storage)
    service = SheetCloseService(local_storage)

    outcomes = await asyncio.gather(
        service.close_sheet(sheet.id),
        service.close_sheet(sheet.id),
        return_exceptions=True,
    )

    assert sum(isinstance(outcome, AlreadyClosedError) for outcome in outcomes) == 1
    assert len(await local_storage.list_invoices()) == 1
    assert len(await local_storage.list_transactions(type=TransactionType.PAYMENT)) == 1
