from typing import Optional
from sqlalchemy import case
from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from ipsguard.models.ip_record import IPRecord, IPStatus
from ipsguard.core.database import upsert_insert
from ipsguard.config import settings


class IPReputationTracker:
    def __init__(self, suspicious_threshold: int = None, blocked_threshold: int = None):
        self.suspicious_threshold = (
            settings.ip_suspicious_threshold if suspicious_threshold is None else suspicious_threshold
        )
        self.blocked_threshold = (
            settings.ip_blocked_threshold if blocked_threshold is None else blocked_threshold
        )

    def track(self, db: Session, ip_address: str, is_threat: bool = False) -> None:
        increment = 1 if is_threat else 0
        new_threat_count = IPRecord.threat_count + increment

        # one statement: concurrent calls for the same address serialise in the store
        stmt = upsert_insert(db, IPRecord).values(
            ip_address=ip_address,
            request_count=1,
            threat_count=increment,
            status=IPStatus.NORMAL.value
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[IPRecord.ip_address],
            set_={
                "request_count": IPRecord.request_count + 1,
                "threat_count": new_threat_count,
                "last_seen": func.now(),
                "status": case(
                    (IPRecord.status == IPStatus.BLOCKED.value, IPStatus.BLOCKED.value),
                    (new_threat_count > self.blocked_threshold, IPStatus.BLOCKED.value),
                    (new_threat_count > self.suspicious_threshold, IPStatus.SUSPICIOUS.value),
                    else_=IPRecord.status
                ),
            }
        )

        db.execute(stmt)
        db.commit()

    def get(self, db: Session, ip_address: str) -> Optional[IPRecord]:
        return db.query(IPRecord).filter(IPRecord.ip_address == ip_address).first()

    def list_records(self, db: Session, status: Optional[str] = None) -> list[IPRecord]:
        query = db.query(IPRecord)
        if status:
            query = query.filter(IPRecord.status == status)
        return query.order_by(IPRecord.threat_count.desc(), IPRecord.last_seen.desc()).all()
