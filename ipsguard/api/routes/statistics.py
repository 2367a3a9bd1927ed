from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import desc
from datetime import datetime, timezone
from ipsguard.api.dependencies import get_database, get_alert_escalator
from ipsguard.models.rule import Rule
from ipsguard.models.threat import Threat
from ipsguard.schemas.statistics import StatisticsResponse, DashboardResponse
from ipsguard.security.alert_escalator import AlertEscalator
from ipsguard.security.statistics_aggregator import StatisticsAggregator

router = APIRouter(prefix="/admin", tags=["statistics"])

aggregator = StatisticsAggregator()


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    days: int = Query(30, ge=1, le=3650),
    db: Session = Depends(get_database),
    escalator: AlertEscalator = Depends(get_alert_escalator)
):
    totals, daily = aggregator.get_window(db, days)

    alert_level = escalator.check_thresholds(totals)

    return StatisticsResponse(
        statistics=totals,
        daily=daily,
        period_days=days,
        alert_level=alert_level
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    db: Session = Depends(get_database),
    escalator: AlertEscalator = Depends(get_alert_escalator)
):
    today = aggregator.get_day(db)

    recent_threats = db.query(Threat).order_by(desc(Threat.timestamp)).limit(10).all()
    top_rules = db.query(Rule).order_by(desc(Rule.blocked_count)).limit(10).all()

    alert_level = escalator.check_thresholds(today)

    return DashboardResponse(
        today=today,
        recent_threats=recent_threats,
        top_rules=top_rules,
        alert_level=alert_level,
        timestamp=datetime.now(timezone.utc)
    )
