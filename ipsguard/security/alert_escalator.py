import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from ipsguard.core.logger import logger
from ipsguard.config import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AlertEscalator:
    """Raises daily alerts when blocked traffic crosses fixed levels.

    Alerts are deduplicated per ``(level, UTC calendar day)`` in an in-process
    map; ``clear_old_alerts`` is meant to be called from a scheduler.
    """

    def __init__(
        self,
        thresholds: Optional[dict[str, int]] = None,
        clock: Callable[[], datetime] = utc_now,
        notifiers: Optional[list[Callable[[dict[str, Any]], None]]] = None
    ):
        self.alert_threshold = thresholds or {
            "low": settings.alert_threshold_low,
            "medium": settings.alert_threshold_medium,
            "high": settings.alert_threshold_high,
            "critical": settings.alert_threshold_critical,
        }
        self.clock = clock
        self.notifiers = notifiers or []
        self.alerts_sent: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _day_key(self) -> str:
        return self.clock().date().isoformat()

    def check_thresholds(self, stats: dict[str, Any]) -> Optional[str]:
        blocked = (stats or {}).get("blocked_requests") or 0

        if blocked >= self.alert_threshold["critical"]:
            level, message = "CRITICAL", f"Critical threat level reached: {blocked} attacks blocked today"
        elif blocked >= self.alert_threshold["high"]:
            level, message = "HIGH", f"High threat level: {blocked} attacks blocked today"
        elif blocked >= self.alert_threshold["medium"]:
            level, message = "MEDIUM", f"Moderate threat level: {blocked} attacks blocked today"
        else:
            return None

        self.send_alert(level, message)
        return level

    def send_alert(self, level: str, message: str) -> bool:
        alert_key = f"{level}-{self._day_key()}"

        with self._lock:
            if alert_key in self.alerts_sent:
                return False
            alert = {
                "level": level,
                "message": message,
                "timestamp": self.clock().isoformat(),
            }
            self.alerts_sent[alert_key] = alert

        logger.warning("security_alert", level=level, message=message)

        for notify in self.notifiers:
            try:
                notify(alert)
            except Exception as e:
                logger.error("alert_notifier_failed", level=level, error=str(e))

        return True

    def notify_threat(self, threat: dict[str, Any]) -> bool:
        if threat.get("severity") not in ("high", "critical"):
            return False

        logger.warning(
            "high_severity_threat",
            source_ip=threat.get("source_ip"),
            threat_type=threat.get("threat_type"),
            severity=threat.get("severity"),
            threat_id=threat.get("id")
        )
        return True

    def clear_old_alerts(self) -> int:
        suffix = f"-{self._day_key()}"
        with self._lock:
            stale = [key for key in self.alerts_sent if not key.endswith(suffix)]
            for key in stale:
                del self.alerts_sent[key]

        if stale:
            logger.info("alerts_cleared", count=len(stale))
        return len(stale)
