from pydantic import BaseModel
from datetime import date as DateType, datetime
from typing import Optional
from ipsguard.schemas.rule import RuleSummary
from ipsguard.schemas.threat import ThreatResponse


class StatisticTotals(BaseModel):
    total_requests: int = 0
    blocked_requests: int = 0
    allowed_requests: int = 0


class DailyStatisticResponse(StatisticTotals):
    date: DateType
    unique_ips: int = 0

    class Config:
        from_attributes = True


class StatisticsResponse(BaseModel):
    statistics: StatisticTotals
    daily: list[DailyStatisticResponse]
    period_days: int
    alert_level: Optional[str] = None


class DashboardResponse(BaseModel):
    today: StatisticTotals
    recent_threats: list[ThreatResponse]
    top_rules: list[RuleSummary]
    alert_level: Optional[str] = None
    timestamp: datetime
