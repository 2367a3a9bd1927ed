from fastapi import Depends, Request
from sqlalchemy.orm import Session
from ipsguard.core.database import get_db
from ipsguard.security.rule_engine import RuleEngine
from ipsguard.security.alert_escalator import AlertEscalator
from ipsguard.security.ips_engine import IPSEngine
from ipsguard.services.threat_broadcaster import ThreatBroadcaster


def get_database(db: Session = Depends(get_db)) -> Session:
    return db


def get_ips_engine(request: Request) -> IPSEngine:
    return request.app.state.ips_engine


def get_rule_engine(request: Request) -> RuleEngine:
    return request.app.state.ips_engine.rule_engine


def get_alert_escalator(request: Request) -> AlertEscalator:
    return request.app.state.ips_engine.escalator


def get_broadcaster(request: Request) -> ThreatBroadcaster:
    return request.app.state.ips_engine.broadcaster
