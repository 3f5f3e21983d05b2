from datetime import datetime
from typing import List, Optional

from pydantic import Field

from localretail.schemas.base import DomainRecord, ApiModel, utc_now


class RouteInfo(DomainRecord):
    id: str
    name: str
    description: str = ""
    areas: List[str] = Field(default_factory=list)
    pincodes: List[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class RouteInfoCreate(ApiModel):
    id: Optional[str] = Field(None, min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    areas: List[str] = Field(default_factory=list)
    pincodes: List[str] = Field(default_factory=list)
    is_active: bool = True


class RouteInfoUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    areas: Optional[List[str]] = None
    pincodes: Optional[List[str]] = None
    is_active: Optional[bool] = None


class RouteListResponse(ApiModel):
    total: int
    routes: list[RouteInfo]
