from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, CheckConstraint
from sqlalchemy.sql import func
from ipsguard.core.database import Base
import enum


class Severity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_VALUES = tuple(s.value for s in Severity)


class Rule(Base):
    __tablename__ = "rules"
    __table_args__ = (
        CheckConstraint(
            "severity IN ('low', 'medium', 'high', 'critical')",
            name="ck_rules_severity"
        ),
        CheckConstraint("blocked_count >= 0", name="ck_rules_blocked_count"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text)
    pattern = Column(String, nullable=False)
    severity = Column(String, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    blocked_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
