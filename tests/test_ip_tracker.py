from concurrent.futures import ThreadPoolExecutor
from ipsguard.security.ip_tracker import IPReputationTracker


def test_first_observation_creates_record(db_session):
    tracker = IPReputationTracker()
    tracker.track(db_session, "10.0.0.1", False)

    record = tracker.get(db_session, "10.0.0.1")
    assert record.request_count == 1
    assert record.threat_count == 0
    assert record.status == "normal"
    assert record.first_seen is not None


def test_first_observation_as_threat(db_session):
    tracker = IPReputationTracker()
    tracker.track(db_session, "10.0.0.2", True)

    record = tracker.get(db_session, "10.0.0.2")
    assert record.request_count == 1
    assert record.threat_count == 1
    assert record.status == "normal"


def test_status_thresholds(db_session):
    tracker = IPReputationTracker()
    ip = "10.0.0.5"

    for _ in range(5):
        tracker.track(db_session, ip, True)
    assert tracker.get(db_session, ip).status == "normal"

    tracker.track(db_session, ip, True)
    assert tracker.get(db_session, ip).status == "suspicious"

    for _ in range(4):
        tracker.track(db_session, ip, True)
    assert tracker.get(db_session, ip).threat_count == 10
    assert tracker.get(db_session, ip).status == "suspicious"


def test_eleven_threats_block_the_address(db_session):
    tracker = IPReputationTracker()
    for _ in range(11):
        tracker.track(db_session, "10.0.0.5", True)

    record = tracker.get(db_session, "10.0.0.5")
    assert record.threat_count == 11
    assert record.request_count == 11
    assert record.status == "blocked"


def test_status_never_regresses(db_session):
    tracker = IPReputationTracker()
    ip = "10.0.0.9"
    for _ in range(11):
        tracker.track(db_session, ip, True)
    for _ in range(20):
        tracker.track(db_session, ip, False)

    record = tracker.get(db_session, ip)
    assert record.status == "blocked"
    assert record.request_count == 31
    assert record.threat_count == 11


def test_clean_traffic_only_counts_requests(db_session):
    tracker = IPReputationTracker()
    for _ in range(50):
        tracker.track(db_session, "10.0.0.3", False)

    record = tracker.get(db_session, "10.0.0.3")
    assert record.request_count == 50
    assert record.threat_count == 0
    assert record.status == "normal"


def test_list_records_filters_by_status(db_session):
    tracker = IPReputationTracker()
    for _ in range(6):
        tracker.track(db_session, "10.0.0.6", True)
    tracker.track(db_session, "10.0.0.7", False)

    suspicious = tracker.list_records(db_session, "suspicious")
    assert [record.ip_address for record in suspicious] == ["10.0.0.6"]
    assert [record.ip_address for record in tracker.list_records(db_session)] == ["10.0.0.6", "10.0.0.7"]


def test_concurrent_tracking_loses_no_updates(session_factory):
    tracker = IPReputationTracker()

    def hit(index):
        db = session_factory()
        try:
            tracker.track(db, "10.0.0.8", index % 2 == 0)
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(hit, range(40)))

    db = session_factory()
    try:
        record = tracker.get(db, "10.0.0.8")
        assert record.request_count == 40
        assert record.threat_count == 20
        assert record.status == "blocked"
    finally:
        db.close()
