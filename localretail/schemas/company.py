from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from localretail.schemas.base import DomainRecord, ApiModel, utc_now


class CompanySettings(DomainRecord):
    company_name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    updated_at: datetime = Field(default_factory=utc_now)


class CompanySettingsUpdate(ApiModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    address: str = ""
    phone: str = Field("", max_length=20)
    email: Optional[EmailStr] = None
