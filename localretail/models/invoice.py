from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.sql import func

from localretail.core.database import Base, JSONType


class InvoiceRow(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("status IN ('paid', 'partial', 'pending')", name="ck_invoices_status"),
    )

    id = Column(String(36), primary_key=True)
    invoice_number = Column(String(120), unique=True, nullable=False, index=True)
    customer_id = Column(String(20), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_name = Column(Text, nullable=False)

    items = Column(JSONType, nullable=False, default=list)
    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    amount_received = Column(Numeric(10, 2), nullable=False, default=0)
    balance_change = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(10), nullable=False, default="pending")

    route_id = Column(String(50), nullable=True)
    route_name = Column(Text, default="No route")
    sheet_id = Column(String(120), nullable=True, index=True)
    cash_amount = Column(Numeric(10, 2), default=0)
    upi_amount = Column(Numeric(10, 2), default=0)
    customer_final_balance = Column(Numeric(10, 2), default=0)

    date = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
