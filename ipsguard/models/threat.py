from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint
from sqlalchemy.sql import func
from ipsguard.core.database import Base
import enum


class ThreatStatus(str, enum.Enum):
    BLOCKED = "blocked"
    ALLOWED = "allowed"
    FLAGGED = "flagged"


class Threat(Base):
    __tablename__ = "threats"
    __table_args__ = (
        CheckConstraint(
            "severity IN ('low', 'medium', 'high', 'critical')",
            name="ck_threats_severity"
        ),
        CheckConstraint(
            "status IN ('blocked', 'allowed', 'flagged')",
            name="ck_threats_status"
        ),
    )

    id = Column(String(36), primary_key=True)
    timestamp = Column(String, nullable=False, index=True)
    source_ip = Column(String, nullable=False, index=True)
    threat_type = Column(String, nullable=False, index=True)
    severity = Column(String, nullable=False, index=True)
    request_method = Column(String)
    request_path = Column(String)
    payload = Column(Text)
    user_agent = Column(String)
    status = Column(String, default=ThreatStatus.BLOCKED.value)
    # no foreign key: threat rows outlive the rule that produced them
    rule_id = Column(Integer, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
