from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.sql import func

from localretail.core.database import Base, JSONType


class RouteInfoRow(Base):
    __tablename__ = "route_infos"

    id = Column(String(50), primary_key=True)
    name = Column(Text, nullable=False)
    description = Column(Text, default="")
    areas = Column(JSONType, default=list)
    pincodes = Column(JSONType, default=list)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
