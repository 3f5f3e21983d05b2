from sqlalchemy import Column, DateTime, Integer, Text
from sqlalchemy.sql import func

from localretail.core.database import Base


class CompanySettingsRow(Base):
    __tablename__ = "company_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_name = Column(Text, nullable=False)
    address = Column(Text, default="")
    phone = Column(Text, default="")
    email = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
