from ipsguard.schemas.rule import RuleCreate, RuleUpdate, RuleResponse, RuleSummary
from ipsguard.schemas.threat import ThreatResponse, ThreatListResponse
from ipsguard.schemas.statistics import (
    StatisticTotals,
    DailyStatisticResponse,
    StatisticsResponse,
    DashboardResponse,
)
from ipsguard.schemas.ip_record import IPRecordResponse, IPTrackingResponse

__all__ = [
    "RuleCreate",
    "RuleUpdate",
    "RuleResponse",
    "RuleSummary",
    "ThreatResponse",
    "ThreatListResponse",
    "StatisticTotals",
    "DailyStatisticResponse",
    "StatisticsResponse",
    "DashboardResponse",
    "IPRecordResponse",
    "IPTrackingResponse",
]
