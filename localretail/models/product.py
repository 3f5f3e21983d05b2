from sqlalchemy import Column, DateTime, Numeric, String, Text
from sqlalchemy.sql import func

from localretail.core.database import Base


class ProductRow(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True)
    name = Column(Text, nullable=False)
    default_price = Column(Numeric(10, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
