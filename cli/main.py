import json
import subprocess
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ipsguard.core.database import Base, SessionLocal
from ipsguard.models.rule import Rule
from ipsguard.security.request_classifier import InspectedRequest, RequestClassifier
from ipsguard.security.rule_engine import RuleEngine
from ipsguard.security.statistics_aggregator import StatisticsAggregator
from ipsguard.services.default_rules import seed_default_rules

console = Console()

SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "green",
}


def gradient_text(text: str):
    colors = [
        "#FF5F5F",
        "#FF7F50",
        "#FF8C00",
        "#FFA500",
        "#FFC107",
        "#FFD700",
    ]

    gradient = Text()
    for i, char in enumerate(text):
        if char == " ":
            gradient.append(char)
            continue

        progress = i / max(len(text) - 1, 1)
        color_index = int(progress * (len(colors) - 1))
        gradient.append(char, style=f"bold {colors[color_index]}")

    return gradient


def print_banner():
    console.print()
    console.print(gradient_text("IPS Guard"))
    console.print()


app = typer.Typer(
    name="ipsguard",
    help="IPS Guard - request inspection and security state",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich"
)


@app.command("init-db")
def init_db(
    seed: bool = typer.Option(True, "--seed/--no-seed", help="Insert the default detection rules")
):
    """Create the tables and seed the default rules"""
    db = SessionLocal()
    try:
        Base.metadata.create_all(bind=db.get_bind())
        inserted = seed_default_rules(db) if seed else 0
    finally:
        db.close()

    console.print(f"[bold green]OK[/bold green] Database ready ({inserted} rules inserted)")


@app.command()
def rules(
    enabled_only: bool = typer.Option(False, "--enabled-only", help="Hide disabled rules")
):
    """List detection rules"""
    db = SessionLocal()
    try:
        query = db.query(Rule)
        if enabled_only:
            query = query.filter(Rule.enabled.is_(True))
        rows = query.order_by(Rule.id).all()
    finally:
        db.close()

    table = Table(header_style="bold cyan", padding=(0, 1))
    table.add_column("ID", justify="right")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Enabled")
    table.add_column("Blocked", justify="right")

    for row in rows:
        table.add_row(
            str(row.id),
            row.name,
            Text(row.severity, style=SEVERITY_STYLES.get(row.severity, "")),
            "yes" if row.enabled else "[dim]no[/dim]",
            str(row.blocked_count)
        )

    console.print(table)


@app.command()
def scan(
    path: str = typer.Argument("/", help="Request path"),
    method: str = typer.Option("GET", "--method", "-m"),
    query: list[str] = typer.Option([], "--query", "-q", help="key=value query parameter"),
    body: Optional[str] = typer.Option(None, "--body", "-b", help="JSON or raw request body"),
    user_agent: Optional[str] = typer.Option(None, "--user-agent")
):
    """Classify a request against the enabled rules without recording anything"""
    params = {}
    for item in query:
        key, _, value = item.partition("=")
        params[key] = value

    parsed_body = None
    if body is not None:
        try:
            parsed_body = json.loads(body)
        except ValueError:
            parsed_body = body

    headers = {"user-agent": user_agent} if user_agent else {}

    rule_engine = RuleEngine()
    db = SessionLocal()
    try:
        rule_engine.reload(db)
    finally:
        db.close()

    result = RequestClassifier(rule_engine).analyze(
        InspectedRequest(method=method.upper(), path=path, query_params=params, body=parsed_body, headers=headers)
    )

    if not result.detected:
        console.print(f"[bold green]ALLOWED[/bold green] no rule matched ({len(rule_engine.snapshot)} active)")
        return

    threat = result.threat
    info = Table(box=None, show_header=False, padding=(0, 2))
    info.add_row("[bold]Rule:[/bold]", threat["threat_type"])
    info.add_row("[bold]Severity:[/bold]", Text(threat["severity"], style=SEVERITY_STYLES.get(threat["severity"], "")))
    info.add_row("[bold]Rule ID:[/bold]", str(threat["rule_id"]))
    info.add_row("[bold]Payload:[/bold]", Text(threat["payload"]))
    console.print(Panel(info, title="BLOCKED", border_style="red"))
    raise typer.Exit(code=1)


@app.command()
def stats(
    days: int = typer.Option(7, "--days", "-d", help="Number of days to show")
):
    """Show daily request statistics"""
    db = SessionLocal()
    try:
        totals, daily = StatisticsAggregator().get_window(db, days)
    finally:
        db.close()

    table = Table(header_style="bold cyan", padding=(0, 1))
    table.add_column("Date")
    table.add_column("Total", justify="right")
    table.add_column("Blocked", justify="right", style="red")
    table.add_column("Allowed", justify="right", style="green")

    for row in daily:
        table.add_row(row.date.isoformat(), str(row.total_requests), str(row.blocked_requests), str(row.allowed_requests))

    table.add_row(
        "[bold]total[/bold]",
        str(totals["total_requests"]),
        str(totals["blocked_requests"]),
        str(totals["allowed_requests"])
    )
    console.print(table)


@app.command()
def dev(
    port: int = typer.Option(8000, "--port", "-p", help="Server port"),
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Server host"),
    reload: bool = typer.Option(True, "--reload/--no-reload", help="Reload on code changes")
):
    """Run the API server in development mode"""
    print_banner()

    info_table = Table(box=None, show_header=False, padding=(0, 2), show_lines=False)
    info_table.add_row("[dim]>[/dim] [bold]API:[/bold]", f"[cyan]http://localhost:{port}[/cyan]")
    info_table.add_row("[dim]>[/dim] [bold]Docs:[/bold]", f"[cyan]http://localhost:{port}/docs[/cyan]")
    info_table.add_row("[dim]>[/dim] [bold]Live:[/bold]", f"[cyan]ws://localhost:{port}/ws/threats[/cyan]")
    console.print(Panel(info_table, border_style="cyan", padding=(1, 2)))

    cmd = [sys.executable, "-m", "uvicorn", "ipsguard.main:app", "--host", host, "--port", str(port)]
    if reload:
        cmd.append("--reload")

    try:
        subprocess.run(cmd, cwd=Path.cwd())
    except KeyboardInterrupt:
        console.print("\n[dim]Server stopped[/dim]\n")


if __name__ == "__main__":
    app()
