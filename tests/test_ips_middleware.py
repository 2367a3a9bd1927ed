import json
import time
from sqlalchemy.exc import SQLAlchemyError
from ipsguard.models.ip_record import IPRecord
from ipsguard.models.rule import Rule
from ipsguard.models.statistic import DailyStatistic
from ipsguard.models.threat import Threat


def test_clean_request_passes_through(client, drain, db_session):
    response = client.get("/api/users")
    drain()

    assert response.status_code == 200
    assert response.json()["total"] == 3

    stats = db_session.query(DailyStatistic).one()
    assert (stats.total_requests, stats.blocked_requests, stats.allowed_requests) == (1, 0, 1)
    record = db_session.query(IPRecord).one()
    assert record.request_count == 1
    assert record.threat_count == 0


def test_sql_injection_is_blocked(client, drain, db_session):
    response = client.get("/api/search", params={"q": "' OR '1'='1"})
    drain()

    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "Forbidden"
    assert body["message"] == "Security threat detected and blocked by Intrusion Prevention System"
    assert body["threat_type"] == "SQL Injection"
    assert body["severity"] == "high"
    assert set(body) == {"error", "message", "threat_id", "threat_type", "severity", "timestamp"}

    threat = db_session.query(Threat).filter(Threat.id == body["threat_id"]).one()
    assert threat.status == "blocked"
    assert threat.request_path == "/api/search"
    assert threat.user_agent == "testclient"

    rule = db_session.query(Rule).filter(Rule.name == "SQL Injection").one()
    assert rule.blocked_count == 1

    stats = db_session.query(DailyStatistic).one()
    assert (stats.total_requests, stats.blocked_requests, stats.allowed_requests) == (1, 1, 0)
    assert db_session.query(IPRecord).one().threat_count == 1


def test_xss_in_json_body_is_blocked(client):
    response = client.post("/api/comment", json={"comment": "<script>alert('xss')</script>"})
    assert response.status_code == 403
    assert response.json()["threat_type"] == "XSS Attack"


def test_path_traversal_is_blocked(client):
    response = client.get("/api/file", params={"path": "../../etc/passwd"})
    assert response.status_code == 403
    assert response.json()["threat_type"] == "Path Traversal"
    assert response.json()["severity"] == "medium"


def test_form_body_is_inspected(client):
    response = client.post("/api/exec", data={"cmd": "ls; cat /etc/shadow"})
    assert response.status_code == 403
    assert response.json()["threat_type"] == "Command Injection"


def test_body_still_reaches_the_route(client):
    response = client.post("/api/login", json={"username": "alice", "password": "wonderland"})
    assert response.status_code == 200
    assert response.json()["username"] == "alice"


def test_forwarded_address_is_tracked(client, drain, db_session):
    for _ in range(11):
        client.get("/api/search", params={"q": "' OR '1'='1"}, headers={"X-Forwarded-For": "10.0.0.5, 172.16.0.1"})
    drain()

    record = db_session.query(IPRecord).filter(IPRecord.ip_address == "10.0.0.5").one()
    assert record.threat_count == 11
    assert record.status == "blocked"


def test_counters_balance_over_mixed_traffic(client, drain, db_session):
    for index in range(12):
        if index % 3 == 0:
            client.get("/api/file", params={"path": "../../etc/passwd"})
        else:
            client.get("/api/data")
    drain()

    stats = db_session.query(DailyStatistic).one()
    assert stats.total_requests == 12
    assert stats.blocked_requests == 4
    assert stats.allowed_requests == 8


def test_admin_paths_are_not_inspected(client, drain, db_session):
    response = client.get("/admin/threats", params={"severity": "high"}, headers={"Referer": "' OR '1'='1"})
    drain()

    assert response.status_code == 200
    assert db_session.query(DailyStatistic).count() == 0


def test_live_feed_receives_threats(client):
    with client.websocket_connect("/ws/threats") as websocket:
        welcome = websocket.receive_json()
        assert welcome["event"] == "welcome"

        response = client.get("/api/search", params={"q": "1 UNION SELECT password FROM users"})
        message = websocket.receive_json()

    assert message["event"] == "threat-detected"
    assert message["data"]["id"] == response.json()["threat_id"]
    assert message["data"]["threat_type"] == "SQL Injection"


def test_health_is_not_inspected(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["active_rules"] == 8
    assert response.json()["redis"] == "disabled"


class SlowRedis:
    def __init__(self, delay):
        self.delay = delay
        self.published = []

    def publish(self, channel, message):
        time.sleep(self.delay)
        self.published.append((channel, json.loads(message)))
        return 0


class UnavailableSession:
    def execute(self, *args, **kwargs):
        raise SQLAlchemyError("database unavailable")

    add = query = commit = execute

    def rollback(self):
        pass

    def close(self):
        pass


def test_slow_publisher_does_not_delay_block(client, app):
    engine = app.state.ips_engine
    slow = SlowRedis(delay=1.0)
    engine.broadcaster._redis = slow
    engine.broadcaster.publish_enabled = True

    started = time.perf_counter()
    response = client.get("/api/search", params={"q": "' OR '1'='1"})
    elapsed = time.perf_counter() - started

    assert response.status_code == 403
    assert elapsed < 0.5

    client.portal.call(engine.wait_for_pushes)
    channel, published = slow.published[0]
    assert channel == "ips:threats"
    assert published["id"] == response.json()["threat_id"]


def test_persistence_failures_do_not_change_decisions(client, app, drain, db_session):
    app.state.ips_engine.bookkeeping.session_factory = UnavailableSession

    blocked = client.get("/api/search", params={"q": "' OR '1'='1"})
    allowed = client.get("/api/users")
    drain()

    assert blocked.status_code == 403
    assert allowed.status_code == 200
    assert db_session.query(Threat).count() == 0
    assert db_session.query(DailyStatistic).count() == 0
    assert db_session.query(IPRecord).count() == 0


def test_inspection_errors_fail_open(client, app, monkeypatch):
    async def broken(request):
        raise RuntimeError("classifier crashed")

    monkeypatch.setattr(app.state.ips_engine, "process_request", broken)

    response = client.get("/api/search", params={"q": "' OR '1'='1"})

    assert response.status_code == 200
    assert response.json()["query"] == "' OR '1'='1"
