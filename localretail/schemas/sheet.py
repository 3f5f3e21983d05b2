from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, model_validator

from localretail.schemas.base import DomainRecord, ApiModel, utc_now
from localretail.schemas.customer import Customer


class SheetStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class DeliveryLine(DomainRecord):
    """Quantity of one product delivered to one customer, and its recorded amount."""
    quantity: float = Field(0.0, ge=0)
    amount: float = Field(0.0, ge=0)


class PaymentSplit(DomainRecord):
    """Money collected from one customer; total is expected to equal cash + upi."""
    cash: float = Field(0.0, ge=0)
    upi: float = Field(0.0, ge=0)
    total: float = Field(0.0, ge=0)


# customer id -> product id -> line
DeliveryData = Dict[str, Dict[str, DeliveryLine]]
# customer id -> split
AmountReceived = Dict[str, PaymentSplit]


class SheetRecord(DomainRecord):
    id: str
    route_id: str
    route_name: str = ""
    customers: List[Customer] = Field(default_factory=list)
    status: SheetStatus = SheetStatus.ACTIVE
    delivery_data: DeliveryData = Field(default_factory=dict)
    amount_received: AmountReceived = Field(default_factory=dict)
    route_outstanding: float = 0.0
    notes: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    closed_at: Optional[datetime] = None

    @property
    def is_closed(self) -> bool:
        return self.status == SheetStatus.CLOSED


class SheetCreate(ApiModel):
    route_id: str = Field(..., min_length=1, max_length=50)
    route_name: Optional[str] = None
    notes: str = ""


class PaymentSplitInput(ApiModel):
    cash: float = Field(0.0, ge=0)
    upi: float = Field(0.0, ge=0)
    total: Optional[float] = Field(None, ge=0)

    @model_validator(mode='after')
    def default_total(self):
        """When total is omitted it is the sum of cash and upi."""
        if self.total is None:
            self.total = round(self.cash + self.upi, 2)
        return self


class SheetEntriesUpdate(ApiModel):
    """Delivery/payment entries for an active sheet; omitted maps are left unchanged."""
    delivery_data: Optional[Dict[str, Dict[str, DeliveryLine]]] = None
    amount_received: Optional[Dict[str, PaymentSplitInput]] = None
    notes: Optional[str] = None


class SheetListResponse(ApiModel):
    total: int
    sheets: list[SheetRecord]


class SheetCloseResult(ApiModel):
    sheet_id: str
    closed_at: datetime
    invoice_numbers: list[str] = Field(default_factory=list)
    payment_ids: list[str] = Field(default_factory=list)
    customers_updated: list[str] = Field(default_factory=list)
    customers_skipped: list[str] = Field(default_factory=list)


class SheetExistsResponse(ApiModel):
    exists: bool
    sheet: Optional[SheetRecord] = None
