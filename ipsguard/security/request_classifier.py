import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from ipsguard.security.rule_engine import RuleEngine, CompiledRule, RuleSnapshot
from ipsguard.config import settings

UNKNOWN_CLIENT = "Unknown"


@dataclass
class InspectedRequest:
    method: str
    path: str
    query_params: dict[str, Any] = field(default_factory=dict)
    path_params: dict[str, Any] = field(default_factory=dict)
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    client_host: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None


@dataclass(frozen=True)
class MatchResult:
    detected: bool
    rule: Optional[CompiledRule] = None
    threat: Optional[dict[str, Any]] = None


NO_MATCH = MatchResult(detected=False)


def build_canonical_text(request: InspectedRequest) -> str:
    return json.dumps(
        {
            "body": request.body,
            "query": request.query_params or {},
            "params": request.path_params or {},
            "path": request.path,
            "headers": {
                "user-agent": request.header("user-agent"),
                "referer": request.header("referer"),
            },
        },
        default=str,
        ensure_ascii=False
    )


def resolve_client_ip(request: InspectedRequest) -> str:
    forwarded = request.header("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.header("x-real-ip")
    if real_ip:
        return real_ip

    if request.client_host:
        return request.client_host

    return UNKNOWN_CLIENT


class RequestClassifier:
    def __init__(self, rule_engine: RuleEngine, payload_max_length: int = None):
        self.rule_engine = rule_engine
        self.payload_max_length = payload_max_length or settings.payload_max_length

    def analyze(self, request: InspectedRequest, snapshot: RuleSnapshot = None) -> MatchResult:
        rules = self.rule_engine.snapshot if snapshot is None else snapshot
        canonical = build_canonical_text(request)

        for rule in rules:
            if rule.matches(canonical):
                return MatchResult(
                    detected=True,
                    rule=rule,
                    threat=self._build_threat(request, rule, canonical)
                )

        return NO_MATCH

    def _build_threat(self, request: InspectedRequest, rule: CompiledRule, canonical: str) -> dict[str, Any]:
        return {
            "id": str(uuid.uuid4()),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source_ip": resolve_client_ip(request),
            "threat_type": rule.name,
            "severity": rule.severity,
            "request_method": request.method,
            "request_path": request.path,
            "payload": canonical[:self.payload_max_length],
            "user_agent": request.header("user-agent") or UNKNOWN_CLIENT,
            "status": "blocked",
            "rule_id": rule.id,
        }
