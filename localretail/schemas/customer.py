from datetime import datetime
from typing import Dict, Optional

from pydantic import Field

from localretail.schemas.base import DomainRecord, ApiModel, utc_now
from localretail.schemas.product import Product


class Customer(DomainRecord):
    id: str
    name: str
    phone: str = ""
    address: str = ""
    route: str = ""
    opening_balance: float = 0.0
    outstanding_amount: float = 0.0
    product_prices: Dict[str, float] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def unit_price_for(self, product: Product) -> float:
        """Customer override price if set (non-zero), else the product default."""
        return self.product_prices.get(product.id) or product.default_price or 0.0


class CustomerCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field("", max_length=20)
    address: str = ""
    route: str = ""
    opening_balance: float = 0.0
    product_prices: Dict[str, float] = Field(default_factory=dict)


class CustomerUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    route: Optional[str] = None
    product_prices: Optional[Dict[str, float]] = None


class CustomerListResponse(ApiModel):
    total: int
    customers: list[Customer]
