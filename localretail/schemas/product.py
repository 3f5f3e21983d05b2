from datetime import datetime
from typing import Optional

from pydantic import Field

from localretail.schemas.base import DomainRecord, ApiModel, utc_now


class Product(DomainRecord):
    id: str
    name: str
    default_price: float = Field(0.0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ProductCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    default_price: float = Field(0.0, ge=0)


class ProductUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    default_price: Optional[float] = Field(None, ge=0)


class ProductListResponse(ApiModel):
    total: int
    products: list[Product]
