import pytest
from typer.testing import CliRunner
from cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def initialized_database():
    result = runner.invoke(app, ["init-db"])
    assert result.exit_code == 0


def test_init_db_is_idempotent():
    result = runner.invoke(app, ["init-db"])

    assert result.exit_code == 0
    assert "0 rules inserted" in result.output


def test_rules_lists_seeded_rules():
    result = runner.invoke(app, ["rules"])

    assert result.exit_code == 0
    assert "SQL Injection" in result.output
    assert "File Upload Attack" in result.output


def test_scan_blocks_sql_injection():
    result = runner.invoke(app, ["scan", "/api/search", "--query", "q=' OR '1'='1"])

    assert result.exit_code == 1
    assert "BLOCKED" in result.output
    assert "SQL Injection" in result.output


def test_scan_inspects_json_body():
    result = runner.invoke(app, ["scan", "/api/comment", "-m", "post", "-b", '{"comment": "<iframe src=x>"}'])

    assert result.exit_code == 1
    assert "XSS Attack" in result.output


def test_scan_allows_clean_request():
    result = runner.invoke(app, ["scan", "/api/users"])

    assert result.exit_code == 0
    assert "ALLOWED" in result.output


def test_stats_prints_totals():
    result = runner.invoke(app, ["stats", "--days", "3"])

    assert result.exit_code == 0
    assert "total" in result.output
