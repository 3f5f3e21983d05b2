# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets a fresh store under tmp_path; nothing is shared
# - `storage` runs a test against both backends (local JSON store and
#   SQLite through the SQL backend)
# - Helpers build the usual catalog: two products, customers on route R001
# ---------------------------------------------------------------------

import pytest

from localretail.schemas.customer import CustomerCreate
from localretail.schemas.product import ProductCreate
from localretail.schemas.sheet import DeliveryLine, PaymentSplitInput, SheetCreate, SheetEntriesUpdate
from localretail.services.customer_service import register_customer
from localretail.services.product_service import create_product
from localretail.services.sheet_service import open_sheet, update_sheet_entries
from localretail.storage.local_storage import LocalStorage
from localretail.storage.sql_storage import SqlStorage

ROUTE_ID = "R001"


@pytest.fixture
async def local_storage(tmp_path):
    storage = LocalStorage(tmp_path / "local_store")
    await storage.init()
    yield storage
    await storage.close()


@pytest.fixture
async def sql_storage(tmp_path):
    storage = SqlStorage(f"sqlite+aiosqlite:///{tmp_path / 'localretail.db'}")
    await storage.init()
    yield storage
    await storage.close()


@pytest.fixture(params=["local", "sql"])
async def storage(request, tmp_path):
    if request.param == "local":
        backend = LocalStorage(tmp_path / "local_store")
    else:
        backend = SqlStorage(f"sqlite+aiosqlite:///{tmp_path / 'localretail.db'}")
    await backend.init()
    yield backend
    await backend.close()


# ---------- Catalog helpers ----------

@pytest.fixture
async def milk(storage):
    return await create_product(storage, ProductCreate(name="Milk 1L", default_price=25))


@pytest.fixture
async def curd(storage):
    return await create_product(storage, ProductCreate(name="Curd 400g", default_price=40))


async def add_customer(storage, name="Asha", opening_balance=0.0, product_prices=None, route=ROUTE_ID):
    return await register_customer(storage, CustomerCreate(
        name=name,
        phone="9876543210",
        address="12 Market Road",
        route=route,
        opening_balance=opening_balance,
        product_prices=product_prices or {},
    ))


async def sheet_with_entries(storage, deliveries=None, payments=None, route_id=ROUTE_ID):
    """
    Open a sheet for the route and record entries.

    deliveries: {customer_id: {product_id: (quantity, amount)}}
    payments:   {customer_id: (cash, upi, total)}
    """
    sheet = await open_sheet(storage, SheetCreate(route_id=route_id, route_name="Market Route"))
    entries = SheetEntriesUpdate(
        delivery_data={
            customer_id: {
                product_id: DeliveryLine(quantity=quantity, amount=amount)
                for product_id, (quantity, amount) in lines.items()
            }
            for customer_id, lines in (deliveries or {}).items()
        },
        amount_received={
            customer_id: PaymentSplitInput(cash=cash, upi=upi, total=total)
            for customer_id, (cash, upi, total) in (payments or {}).items()
        },
    )
    return await update_sheet_entries(storage, sheet.id, entries)
