from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from localretail.schemas.base import DomainRecord, ApiModel, utc_now


class InvoiceStatus(str, Enum):
    """Invoice payment status"""
    PAID = "paid"
    PARTIAL = "partial"
    PENDING = "pending"


class InvoiceItem(DomainRecord):
    product_name: str
    quantity: float
    price: float
    total: float


class Invoice(DomainRecord):
    id: str
    invoice_number: str
    customer_id: str
    customer_name: str
    items: List[InvoiceItem] = Field(default_factory=list)
    subtotal: float = 0.0
    total_amount: float = 0.0
    amount_received: float = 0.0
    balance_change: float = 0.0
    status: InvoiceStatus = InvoiceStatus.PENDING
    route_id: Optional[str] = None
    route_name: str = "No route"
    sheet_id: Optional[str] = None
    cash_amount: float = 0.0
    upi_amount: float = 0.0
    customer_final_balance: float = 0.0
    date: datetime = Field(default_factory=utc_now)
    created_at: datetime = Field(default_factory=utc_now)


class InvoiceItemCreate(ApiModel):
    product_name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., gt=0)
    price: float = Field(..., gt=0)


class InvoiceCreate(ApiModel):
    """Invoice raised outside a route sheet; amount received is cash + upi."""
    customer_id: str = Field(..., min_length=1)
    items: List[InvoiceItemCreate] = Field(..., min_length=1)
    cash_amount: float = Field(0.0, ge=0)
    upi_amount: float = Field(0.0, ge=0)

    @model_validator(mode='after')
    def product_names_present(self):
        names = [item.product_name.strip() for item in self.items]
        if any(not name for name in names):
            raise ValueError("Every item needs a product name")
        return self


class InvoiceListResponse(ApiModel):
    total: int
    total_amount: float
    invoices: list[Invoice]
