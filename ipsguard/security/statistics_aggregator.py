from datetime import date, datetime, timedelta, timezone
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from ipsguard.models.statistic import DailyStatistic
from ipsguard.core.database import upsert_insert


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class StatisticsAggregator:
    def __init__(self, clock=utc_today):
        self.clock = clock

    def today(self) -> date:
        return self.clock()

    def record(self, db: Session, blocked: bool = False, day: Optional[date] = None) -> None:
        blocked_inc = 1 if blocked else 0
        allowed_inc = 0 if blocked else 1

        stmt = upsert_insert(db, DailyStatistic).values(
            date=day or self.today(),
            total_requests=1,
            blocked_requests=blocked_inc,
            allowed_requests=allowed_inc
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DailyStatistic.date],
            set_={
                "total_requests": DailyStatistic.total_requests + 1,
                "blocked_requests": DailyStatistic.blocked_requests + blocked_inc,
                "allowed_requests": DailyStatistic.allowed_requests + allowed_inc,
            }
        )

        db.execute(stmt)
        db.commit()

    def get_day(self, db: Session, day: Optional[date] = None) -> dict[str, int]:
        row = db.query(DailyStatistic).filter(DailyStatistic.date == (day or self.today())).first()
        if row is None:
            return {"total_requests": 0, "blocked_requests": 0, "allowed_requests": 0, "unique_ips": 0}
        return {
            "total_requests": row.total_requests,
            "blocked_requests": row.blocked_requests,
            "allowed_requests": row.allowed_requests,
            "unique_ips": row.unique_ips,
        }

    def get_window(self, db: Session, days: int = 30) -> tuple[dict[str, int], list[DailyStatistic]]:
        since = self.today() - timedelta(days=days)

        totals = db.query(
            func.coalesce(func.sum(DailyStatistic.total_requests), 0),
            func.coalesce(func.sum(DailyStatistic.blocked_requests), 0),
            func.coalesce(func.sum(DailyStatistic.allowed_requests), 0)
        ).filter(DailyStatistic.date >= since).one()

        daily = db.query(DailyStatistic).filter(
            DailyStatistic.date >= since
        ).order_by(DailyStatistic.date.desc()).all()

        return {
            "total_requests": int(totals[0]),
            "blocked_requests": int(totals[1]),
            "allowed_requests": int(totals[2]),
        }, daily
