"""
Error taxonomy shared by the storage layer, services and the API.
"""

from typing import Optional


class LocalRetailError(Exception):
    """Base class for all application errors."""


class NotFoundError(LocalRetailError):
    """A referenced sheet, customer, product or record does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class AlreadyClosedError(LocalRetailError):
    """A closed sheet was asked to close again or to change."""

    def __init__(self, sheet_id: str):
        self.sheet_id = sheet_id
        super().__init__(f"Sheet {sheet_id} is already closed")


class ConsistencyError(LocalRetailError):
    """An arithmetic check on a sheet line failed beyond tolerance."""

    def __init__(
        self,
        message: str,
        sheet_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        product_id: Optional[str] = None,
        expected: Optional[float] = None,
        actual: Optional[float] = None,
    ):
        self.sheet_id = sheet_id
        self.customer_id = customer_id
        self.product_id = product_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{message} (sheet={sheet_id}, customer={customer_id}, "
            f"product={product_id}, expected={expected}, actual={actual})"
        )

    def to_dict(self) -> dict:
        return {
            "sheet_id": self.sheet_id,
            "customer_id": self.customer_id,
            "product_id": self.product_id,
            "expected": self.expected,
            "actual": self.actual,
        }


class BackendError(LocalRetailError):
    """A storage operation failed for infrastructural reasons."""

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation}: {cause}")
