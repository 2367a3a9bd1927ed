import re
import threading
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from ipsguard.models.rule import Rule
from ipsguard.core.logger import logger


@dataclass(frozen=True)
class CompiledRule:
    id: int
    name: str
    severity: str
    pattern: str
    matcher: re.Pattern

    def matches(self, text: str) -> bool:
        return self.matcher.search(text) is not None


RuleSnapshot = tuple[CompiledRule, ...]


def compile_pattern(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


class RuleEngine:
    """Holds the active rule snapshot.

    Readers take ``snapshot`` and iterate it without locking; ``reload`` builds
    a fresh tuple and swaps the reference in one assignment, so a reader sees
    either the old list or the new one, never a mix.
    """

    def __init__(self):
        self._snapshot: RuleSnapshot = ()
        self._reload_lock = threading.Lock()

    @property
    def snapshot(self) -> RuleSnapshot:
        return self._snapshot

    def reload(self, db: Session) -> RuleSnapshot:
        with self._reload_lock:
            try:
                rows = db.query(Rule).filter(Rule.enabled.is_(True)).order_by(Rule.id).all()
            except SQLAlchemyError as e:
                logger.error("rules_load_failed", error=str(e))
                return self._snapshot

            compiled = []
            for row in rows:
                rule = self._compile(row)
                if rule is not None:
                    compiled.append(rule)

            self._snapshot = tuple(compiled)

        logger.info("rules_loaded", active=len(compiled), skipped=len(rows) - len(compiled))
        return self._snapshot

    def publish(self, rules: list[CompiledRule]) -> RuleSnapshot:
        with self._reload_lock:
            self._snapshot = tuple(rules)
        return self._snapshot

    def _compile(self, row: Rule) -> Optional[CompiledRule]:
        try:
            matcher = compile_pattern(row.pattern)
        except (re.error, TypeError) as e:
            logger.error("rule_compile_failed", rule_id=row.id, rule=row.name, error=str(e))
            return None

        return CompiledRule(
            id=row.id,
            name=row.name,
            severity=row.severity,
            pattern=row.pattern,
            matcher=matcher
        )
