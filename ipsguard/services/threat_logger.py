from typing import Any
from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from ipsguard.models.threat import Threat
from ipsguard.models.rule import Rule
from ipsguard.core.logger import logger

THREAT_FIELDS = (
    "id",
    "timestamp",
    "source_ip",
    "threat_type",
    "severity",
    "request_method",
    "request_path",
    "payload",
    "user_agent",
    "status",
    "rule_id",
)


class ThreatLogger:
    @staticmethod
    def log_threat(db: Session, threat: dict[str, Any]) -> Threat:
        try:
            record = Threat(**{name: threat.get(name) for name in THREAT_FIELDS})
            db.add(record)
            db.query(Rule).filter(Rule.id == threat.get("rule_id")).update(
                {
                    Rule.blocked_count: Rule.blocked_count + 1,
                    Rule.updated_at: func.now(),
                },
                synchronize_session=False
            )
            db.commit()

            logger.info(
                "threat_logged",
                threat_id=record.id,
                threat_type=record.threat_type,
                severity=record.severity
            )

            return record

        except Exception as e:
            logger.error("threat_logger_error", threat_id=threat.get("id"), error=str(e))
            db.rollback()
            raise
