from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from localretail.schemas.base import DomainRecord, ApiModel, utc_now
from localretail.schemas.invoice import InvoiceItem


class TransactionType(str, Enum):
    SALE = "sale"
    PAYMENT = "payment"
    ADJUSTMENT = "adjustment"


class Transaction(DomainRecord):
    """
    One posted ledger entry.
    balance_change > 0 increases what the customer owes, < 0 reduces it.
    """
    id: str
    customer_id: str
    customer_name: str
    type: TransactionType
    items: List[InvoiceItem] = Field(default_factory=list)
    total_amount: float = 0.0
    amount_received: float = 0.0
    balance_change: float = 0.0
    invoice_number: str
    cash_amount: float = 0.0
    upi_amount: float = 0.0
    route_id: Optional[str] = None
    route_name: Optional[str] = None
    sheet_id: Optional[str] = None
    date: datetime = Field(default_factory=utc_now)
    created_at: datetime = Field(default_factory=utc_now)


class PaymentCreate(ApiModel):
    """Payment collected outside a route sheet."""
    customer_id: str = Field(..., min_length=1)
    cash_amount: float = Field(0.0, ge=0)
    upi_amount: float = Field(0.0, ge=0)

    @model_validator(mode='after')
    def positive_total(self):
        if self.cash_amount + self.upi_amount <= 0:
            raise ValueError("Payment amount must be greater than 0")
        return self

    @property
    def total(self) -> float:
        return round(self.cash_amount + self.upi_amount, 2)


class TransactionListResponse(ApiModel):
    total: int
    total_balance_change: float
    transactions: list[Transaction]


class DuplicatePaymentReport(ApiModel):
    duplicates_found: int
    duplicate_ids: list[str]
