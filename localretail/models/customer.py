from sqlalchemy import Column, DateTime, Numeric, String, Text
from sqlalchemy.sql import func

from localretail.core.database import Base, JSONType


class CustomerRow(Base):
    __tablename__ = "customers"

    id = Column(String(20), primary_key=True)  # 6-digit sequential id
    name = Column(Text, nullable=False)
    phone = Column(Text, default="")
    address = Column(Text, default="")
    route = Column(Text, default="", index=True)

    opening_balance = Column(Numeric(10, 2), default=0)
    outstanding_amount = Column(Numeric(10, 2), default=0)
    product_prices = Column(JSONType, default=dict)  # product id -> price

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<CustomerRow(id='{self.id}', name='{self.name}')>"
