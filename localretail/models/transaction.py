from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.sql import func

from localretail.core.database import Base, JSONType


class TransactionRow(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("type IN ('sale', 'payment', 'adjustment')", name="ck_transactions_type"),
    )

    id = Column(String(36), primary_key=True)
    customer_id = Column(String(20), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_name = Column(Text, nullable=False)
    type = Column(String(12), nullable=False, index=True)  # sale / payment / adjustment

    items = Column(JSONType, default=list)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    amount_received = Column(Numeric(10, 2), nullable=False, default=0)
    balance_change = Column(Numeric(10, 2), nullable=False, default=0)
    invoice_number = Column(String(120), unique=True, nullable=False)
    cash_amount = Column(Numeric(10, 2), default=0)
    upi_amount = Column(Numeric(10, 2), default=0)

    route_id = Column(String(50), nullable=True)
    route_name = Column(Text, nullable=True)
    sheet_id = Column(String(120), nullable=True, index=True)

    date = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
