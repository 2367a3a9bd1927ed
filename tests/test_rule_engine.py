from ipsguard.models.rule import Rule
from ipsguard.security.rule_engine import RuleEngine
from ipsguard.services.default_rules import DEFAULT_RULES, seed_default_rules


def add_rule(db, name, pattern, severity="medium", enabled=True):
    rule = Rule(name=name, pattern=pattern, severity=severity, enabled=enabled)
    db.add(rule)
    db.commit()
    return rule


def test_reload_compiles_enabled_rules_in_store_order(db_session):
    first = add_rule(db_session, "First", "alpha")
    add_rule(db_session, "Disabled", "beta", enabled=False)
    third = add_rule(db_session, "Third", "gamma", severity="critical")

    engine = RuleEngine()
    snapshot = engine.reload(db_session)

    assert [rule.id for rule in snapshot] == [first.id, third.id]
    assert snapshot[1].severity == "critical"
    assert snapshot[0].matches("ALPHA in upper case")


def test_invalid_pattern_is_excluded_without_failing_reload(db_session):
    add_rule(db_session, "Broken", "(unclosed")
    add_rule(db_session, "Working", "select")

    snapshot = RuleEngine().reload(db_session)

    assert [rule.name for rule in snapshot] == ["Working"]


def test_reload_publishes_a_new_snapshot(db_session):
    rule = add_rule(db_session, "Keyword", "keyword")
    engine = RuleEngine()
    before = engine.reload(db_session)

    rule.enabled = False
    db_session.commit()
    after = engine.reload(db_session)

    assert len(before) == 1
    assert after == ()
    assert engine.snapshot is after
    assert isinstance(before, tuple)


def test_deleted_rule_leaves_snapshot_on_next_reload(db_session):
    rule = add_rule(db_session, "Temporary", "temp")
    engine = RuleEngine()
    engine.reload(db_session)

    db_session.delete(rule)
    db_session.commit()

    assert len(engine.snapshot) == 1
    assert engine.reload(db_session) == ()


def test_seed_default_rules_is_idempotent(db_session):
    assert seed_default_rules(db_session) == len(DEFAULT_RULES)
    assert seed_default_rules(db_session) == 0

    snapshot = RuleEngine().reload(db_session)
    assert [rule.name for rule in snapshot] == [rule["name"] for rule in DEFAULT_RULES]
