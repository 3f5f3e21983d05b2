import secrets
import string
import time
from datetime import datetime, timezone
from typing import Optional

BASE36_ALPHABET = string.digits + string.ascii_lowercase


def generate_custom_id(prefix: str, length: int = 8) -> str:
    random_part = ''.join(secrets.choice(string.ascii_uppercase)
                          for _ in range(length))
    return f"{prefix}-{random_part}"


def _random_base36(length: int = 9) -> str:
    return ''.join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_sheet_id(route_id: str, at: Optional[datetime] = None) -> str:
    """ROUTE-<YYYYMMDD>-<HHMMSS>-<routeId>, date and time in UTC."""
    at = at or datetime.now(timezone.utc)
    if at.tzinfo is not None:
        at = at.astimezone(timezone.utc)
    return f"ROUTE-{at.strftime('%Y%m%d')}-{at.strftime('%H%M%S')}-{route_id}"


def generate_unique_transaction_id(kind: str, customer_id: str, sheet_id: Optional[str] = None) -> str:
    """
    Invoice number for a sale or identifier for a payment.

    SALE-<sheetId>-<customerId>-<ms>-<rand9> / PAY-<sheetId>-<customerId>-<ms>-<rand9>;
    entries posted outside a sheet use MANUAL in place of the sheet id.
    """
    prefix = {"sale": "SALE", "payment": "PAY"}.get(kind)
    if prefix is None:
        raise ValueError(f"Unsupported transaction kind '{kind}'")
    return f"{prefix}-{sheet_id or 'MANUAL'}-{customer_id}-{_now_ms()}-{_random_base36()}"


def generate_route_id() -> str:
    return f"R{_now_ms()}"


def generate_opening_balance_id(customer_id: str) -> str:
    return f"INITIAL-{customer_id}"
