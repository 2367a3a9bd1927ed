from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.sql import func
from ipsguard.core.database import Base
import enum


class IPStatus(str, enum.Enum):
    NORMAL = "normal"
    SUSPICIOUS = "suspicious"
    BLOCKED = "blocked"


class IPRecord(Base):
    __tablename__ = "ip_tracking"
    __table_args__ = (
        CheckConstraint(
            "status IN ('normal', 'suspicious', 'blocked')",
            name="ck_ip_tracking_status"
        ),
    )

    ip_address = Column(String, primary_key=True)
    request_count = Column(Integer, default=0, nullable=False)
    threat_count = Column(Integer, default=0, nullable=False)
    first_seen = Column(DateTime(timezone=True), server_default=func.now())
    last_seen = Column(DateTime(timezone=True), server_default=func.now())
    status = Column(String, default=IPStatus.NORMAL.value, nullable=False, index=True)
