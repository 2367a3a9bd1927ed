from ipsguard.security.rule_engine import RuleEngine, CompiledRule
from ipsguard.security.request_classifier import RequestClassifier, InspectedRequest, MatchResult
from ipsguard.security.request_analyzer import RequestAnalyzer
from ipsguard.security.ip_tracker import IPReputationTracker
from ipsguard.security.statistics_aggregator import StatisticsAggregator
from ipsguard.security.alert_escalator import AlertEscalator
from ipsguard.security.ips_engine import IPSEngine

__all__ = [
    "RuleEngine",
    "CompiledRule",
    "RequestClassifier",
    "InspectedRequest",
    "MatchResult",
    "RequestAnalyzer",
    "IPReputationTracker",
    "StatisticsAggregator",
    "AlertEscalator",
    "IPSEngine",
]
