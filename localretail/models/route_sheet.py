from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String, Text
from sqlalchemy.sql import func

from localretail.core.database import Base, JSONType


class RouteSheetRow(Base):
    __tablename__ = "route_sheets"
    __table_args__ = (
        CheckConstraint("status IN ('active', 'closed')", name="ck_route_sheets_status"),
    )

    id = Column(String(120), primary_key=True)  # ROUTE-<YYYYMMDD>-<HHMMSS>-<routeId>
    route_id = Column(String(50), nullable=False, index=True)
    route_name = Column(Text, nullable=False, default="")

    customers = Column(JSONType, nullable=False, default=list)  # customer snapshot
    status = Column(String(10), nullable=False, default="active", index=True)
    delivery_data = Column(JSONType, nullable=False, default=dict)
    amount_received = Column(JSONType, nullable=False, default=dict)
    route_outstanding = Column(Numeric(10, 2), default=0)
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    closed_at = Column(DateTime(timezone=True), nullable=True)
