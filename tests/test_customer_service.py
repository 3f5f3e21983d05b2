import pytest

from conftest import add_customer
from localretail.core.exceptions import NotFoundError
from localretail.schemas.customer import CustomerUpdate
from localretail.schemas.transaction import TransactionType
from localretail.services.customer_service import (
    delete_customer,
    get_all_customers,
    get_customer_by_id,
    get_route_names,
    update_customer,
)
from localretail.services.ledger_service import get_customer_transactions


async def test_customer_ids_are_sequential_from_100001(storage):
    first = await add_customer(storage, name="Asha")
    second = await add_customer(storage, name="Ravi")

    assert first.id == "100001"
    assert second.id == "100002"


async def test_opening_balance_is_posted_as_adjustment(storage):
    customer = await add_customer(storage, opening_balance=250)

    assert customer.outstanding_amount == pytest.approx(250)
    transactions = await get_customer_transactions(storage, customer.id)
    assert len(transactions) == 1
    assert transactions[0].type == TransactionType.ADJUSTMENT
    assert transactions[0].invoice_number == f"INITIAL-{customer.id}"
    assert transactions[0].balance_change == pytest.approx(250)


async def test_zero_opening_balance_posts_nothing(storage):
    customer = await add_customer(storage)

    assert await get_customer_transactions(storage, customer.id) == []


async def test_update_changes_only_given_fields(storage):
    customer = await add_customer(storage, opening_balance=80)

    updated = await update_customer(storage, customer.id, CustomerUpdate(phone="9000000000"))

    assert updated.phone == "9000000000"
    assert updated.name == customer.name
    assert updated.outstanding_amount == pytest.approx(80)


async def test_update_ignores_explicit_nulls(storage):
    customer = await add_customer(storage)

    updated = await update_customer(
        storage, customer.id, CustomerUpdate.model_validate({"name": None, "address": "4 Lake View"})
    )

    assert updated.name == customer.name
    assert updated.address == "4 Lake View"


async def test_update_unknown_customer(storage):
    with pytest.raises(NotFoundError):
        await update_customer(storage, "999999", CustomerUpdate(name="Nobody"))


async def test_delete_customer(storage):
    customer = await add_customer(storage)

    await delete_customer(storage, customer.id)

    with pytest.raises(NotFoundError):
        await get_customer_by_id(storage, customer.id)
    with pytest.raises(NotFoundError):
        await delete_customer(storage, customer.id)


async def test_filters_by_route_and_search(storage):
    await add_customer(storage, name="Asha Patel", route="R001")
    await add_customer(storage, name="Ravi Kumar", route="R002")
    await add_customer(storage, name="Meena Patel", route="R002")

    assert [c.name for c in await get_all_customers(storage, route="R002")] == ["Ravi Kumar", "Meena Patel"]
    assert {c.name for c in await get_all_customers(storage, search="patel")} == {"Asha Patel", "Meena Patel"}
    assert [c.name for c in await get_all_customers(storage, route="R002", search="patel")] == ["Meena Patel"]
    assert [c.id for c in await get_all_customers(storage, search="100001")] == ["100001"]


async def test_route_names_are_distinct_and_sorted(storage):
    await add_customer(storage, route="R002")
    await add_customer(storage, route="R001")
    await add_customer(storage, route="R002")
    await add_customer(storage, route="")

    assert await get_route_names(storage) == ["R001", "R002"]
