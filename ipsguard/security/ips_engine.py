import asyncio
from typing import Any, Optional
from fastapi import status
from fastapi.responses import JSONResponse
from ipsguard.security.rule_engine import RuleEngine
from ipsguard.security.request_classifier import RequestClassifier, InspectedRequest, MatchResult, resolve_client_ip
from ipsguard.security.ip_tracker import IPReputationTracker
from ipsguard.security.statistics_aggregator import StatisticsAggregator
from ipsguard.security.alert_escalator import AlertEscalator
from ipsguard.services.bookkeeping import BookkeepingQueue
from ipsguard.services.threat_broadcaster import ThreatBroadcaster
from ipsguard.services.threat_logger import ThreatLogger
from ipsguard.core.logger import logger

BLOCK_MESSAGE = "Security threat detected and blocked by Intrusion Prevention System"


class IPSEngine:
    def __init__(
        self,
        rule_engine: RuleEngine,
        escalator: AlertEscalator,
        bookkeeping: BookkeepingQueue,
        broadcaster: Optional[ThreatBroadcaster] = None,
        tracker: Optional[IPReputationTracker] = None,
        aggregator: Optional[StatisticsAggregator] = None
    ):
        self.rule_engine = rule_engine
        self.classifier = RequestClassifier(self.rule_engine)
        self.tracker = tracker or IPReputationTracker()
        self.aggregator = aggregator or StatisticsAggregator()
        self.escalator = escalator
        self.broadcaster = broadcaster or ThreatBroadcaster()
        self.bookkeeping = bookkeeping
        self._pushes: set[asyncio.Task] = set()

    async def process_request(self, request: InspectedRequest) -> tuple[bool, Optional[JSONResponse], MatchResult]:
        analysis = self.classifier.analyze(request)
        day = self.aggregator.today()

        if analysis.detected:
            threat = analysis.threat
            self._record_threat(threat, day)
            self._schedule_push(threat)
            self.escalator.notify_threat(threat)

            logger.warning(
                "threat_blocked",
                threat_type=threat["threat_type"],
                source_ip=threat["source_ip"],
                method=request.method,
                path=request.path
            )
            return False, self._create_blocked_response(threat), analysis

        self._record_allowed(resolve_client_ip(request), day)
        return True, None, analysis

    async def wait_for_pushes(self) -> None:
        if self._pushes:
            await asyncio.gather(*self._pushes, return_exceptions=True)

    def _schedule_push(self, threat: dict[str, Any]) -> None:
        task = asyncio.create_task(self.broadcaster.broadcast(threat))
        self._pushes.add(task)
        task.add_done_callback(lambda done: self._push_finished(done, threat["id"]))

    def _push_finished(self, task: asyncio.Task, threat_id: str) -> None:
        self._pushes.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("threat_broadcast_error", threat_id=threat_id, error=str(error))

    def _record_threat(self, threat: dict[str, Any], day) -> None:
        self.bookkeeping.submit("log_threat", lambda db: ThreatLogger.log_threat(db, threat))
        self.bookkeeping.submit("track_ip", lambda db: self.tracker.track(db, threat["source_ip"], True))
        self.bookkeeping.submit("record_statistics", lambda db: self.aggregator.record(db, blocked=True, day=day))

    def _record_allowed(self, ip_address: str, day) -> None:
        self.bookkeeping.submit("record_statistics", lambda db: self.aggregator.record(db, blocked=False, day=day))
        self.bookkeeping.submit("track_ip", lambda db: self.tracker.track(db, ip_address, False))

    def _create_blocked_response(self, threat: dict[str, Any]) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={
                "error": "Forbidden",
                "message": BLOCK_MESSAGE,
                "threat_id": threat["id"],
                "threat_type": threat["threat_type"],
                "severity": threat["severity"],
                "timestamp": threat["timestamp"],
            }
        )
