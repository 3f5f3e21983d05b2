import re
from datetime import datetime, timedelta, timezone

import pytest

from localretail.utils.identifiers import (
    generate_custom_id,
    generate_opening_balance_id,
    generate_route_id,
    generate_sheet_id,
    generate_unique_transaction_id,
)


def test_sheet_id_format():
    at = datetime(2025, 8, 8, 4, 13, 5, tzinfo=timezone.utc)
    assert generate_sheet_id("R001", at) == "ROUTE-20250808-041305-R001"


def test_sheet_id_is_expressed_in_utc():
    ist = timezone(timedelta(hours=5, minutes=30))
    at = datetime(2025, 8, 8, 9, 43, 5, tzinfo=ist)
    assert generate_sheet_id("R001", at) == "ROUTE-20250808-041305-R001"


def test_sheet_id_defaults_to_now():
    assert re.fullmatch(r"ROUTE-\d{8}-\d{6}-R7", generate_sheet_id("R7"))


@pytest.mark.parametrize("kind, prefix", [("sale", "SALE"), ("payment", "PAY")])
def test_transaction_id_format(kind, prefix):
    value = generate_unique_transaction_id(kind, "100001", "ROUTE-20250808-041305-R001")
    assert re.fullmatch(
        rf"{prefix}-ROUTE-20250808-041305-R001-100001-\d{{13}}-[0-9a-z]{{9}}", value
    )


def test_transaction_id_outside_a_sheet():
    assert generate_unique_transaction_id("payment", "100001").startswith("PAY-MANUAL-100001-")


def test_transaction_ids_are_unique():
    ids = {generate_unique_transaction_id("sale", "100001", "S1") for _ in range(500)}
    assert len(ids) == 500


def test_transaction_id_rejects_unknown_kind():
    with pytest.raises(ValueError):
        generate_unique_transaction_id("refund", "100001")


def test_route_and_opening_balance_ids():
    assert re.fullmatch(r"R\d{13}", generate_route_id())
    assert generate_opening_balance_id("100001") == "INITIAL-100001"
    assert re.fullmatch(r"PRD-[A-Z]{8}", generate_custom_id("PRD"))
