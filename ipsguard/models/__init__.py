from ipsguard.models.rule import Rule, Severity
from ipsguard.models.threat import Threat, ThreatStatus
from ipsguard.models.ip_record import IPRecord, IPStatus
from ipsguard.models.statistic import DailyStatistic

__all__ = [
    "Rule",
    "Severity",
    "Threat",
    "ThreatStatus",
    "IPRecord",
    "IPStatus",
    "DailyStatistic",
]
