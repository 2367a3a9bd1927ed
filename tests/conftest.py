import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="ipsguard-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'ips.db')}"
os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_PUBLISH_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from ipsguard.core.database import Base, create_database_engine, get_db
from ipsguard.main import create_app
from ipsguard.security.rule_engine import CompiledRule, RuleEngine, compile_pattern
from ipsguard.services.default_rules import DEFAULT_RULES


@pytest.fixture()
def session_factory(tmp_path):
    engine = create_database_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture()
def default_rule_engine():
    engine = RuleEngine()
    engine.publish([
        CompiledRule(
            id=index,
            name=rule["name"],
            severity=rule["severity"],
            pattern=rule["pattern"],
            matcher=compile_pattern(rule["pattern"])
        )
        for index, rule in enumerate(DEFAULT_RULES, start=1)
    ])
    return engine


@pytest.fixture()
def app(session_factory):
    application = create_app(session_factory=session_factory)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def drain(client, app):
    def _drain():
        client.portal.call(app.state.ips_engine.bookkeeping.join)
    return _drain
