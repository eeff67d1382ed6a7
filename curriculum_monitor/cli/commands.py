"""CLI commands for the curriculum monitor."""

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..auth.service import AuthService, OutboxDelivery
from ..auth.users import UserDirectory
from ..exceptions import CurriculumMonitorError, ValidationError
from ..models.data_models import Category, MonitorReport, Priority, Severity
from ..orchestrator.main import CurriculumMonitorOrchestrator
from ..storage.csv_store import CSVRecordStore
from ..storage.sample_data import generate_sample_tables
from ..utils.config import Config
from ..utils.logging import setup_logging
from ..utils.validation import validate_csv_file, validate_data_dir

console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "red",
    Severity.NEEDS_IMPROVEMENT: "yellow",
    Severity.QUALITY_ISSUE: "magenta",
    Severity.DECLINING_TREND: "cyan",
}

STATUS_STYLES = {
    "Excellent": "green",
    "Good": "blue",
    "NeedsImprovement": "yellow",
    "Critical": "red",
}


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--config-file', type=click.Path(), help='Configuration file path')
@click.option('--data-dir', type=click.Path(), help='Directory holding the category tables')
@click.pass_context
def cli(ctx, debug, config_file, data_dir):
    """Curriculum quality monitor CLI."""
    ctx.ensure_object(dict)

    config = Config(config_file)
    if data_dir:
        config.set("data_dir", data_dir)
        config.set("snapshot_cache_path", str(Path(data_dir) / "last_known_good.json"))
        config.set("users_path", str(Path(data_dir) / "users.json"))

    log_level = "DEBUG" if debug else config.log_level
    setup_logging(log_level=log_level, log_file=config.log_file or None, console_output=True)

    is_valid, error = validate_data_dir(config.data_dir)
    if not is_valid:
        raise click.UsageError(error)

    ctx.obj['config'] = config


def _auth_service(config: Config) -> AuthService:
    return AuthService(
        directory=UserDirectory(config.users_path),
        delivery=OutboxDelivery(str(Path(config.data_dir) / "outbox")),
        store=CSVRecordStore(config.data_dir),
        config=config,
    )


@cli.command()
@click.option('--output', help='Write the report to this file')
@click.option('--format', 'output_format', default=None,
              type=click.Choice(['markdown', 'json', 'text']), help='Report format')
@click.pass_context
def analyze(ctx, output, output_format):
    """Analyze the current snapshot and show findings."""
    config = ctx.obj['config']
    output_format = output_format or config.output_format

    async def run_analysis():
        orchestrator = CurriculumMonitorOrchestrator(config)
        report = await orchestrator.analyze()

        if output:
            Path(output).write_text(
                orchestrator.generate_report(report, output_format), encoding="utf-8"
            )
            console.print(f"[green]Report saved to {output}[/green]")

        display_analysis_results(report)
        return report

    report = asyncio.run(run_analysis())
    if report.status == "failed":
        ctx.exit(1)


@cli.command()
@click.option('--seed', 'rng_seed', type=int, help='Random seed for reproducible data')
@click.option('--actor', default='system', help='Identity recorded in the audit log')
@click.pass_context
def seed(ctx, rng_seed, actor):
    """Write a sample dataset into the data directory."""
    config = ctx.obj['config']

    async def write_tables():
        store = CSVRecordStore(config.data_dir)
        for category, rows in generate_sample_tables(rng_seed).items():
            await store.replace_all(category, rows, actor)
            console.print(f"[green]✓ {category.value}: {len(rows)} rows[/green]")

    asyncio.run(write_tables())


@cli.command('import-csv')
@click.argument('category', type=click.Choice([c.value for c in Category]))
@click.argument('file_path', type=click.Path())
@click.option('--actor', required=True, help='Identity recorded in the audit log')
@click.pass_context
def import_csv(ctx, category, file_path, actor):
    """Replace a category table from a CSV file."""
    config = ctx.obj['config']

    is_valid, error = validate_csv_file(file_path)
    if not is_valid:
        console.print(f"[red]{error}[/red]")
        ctx.exit(1)

    async def run_import():
        orchestrator = CurriculumMonitorOrchestrator(config)
        return await orchestrator.import_csv(category, file_path, actor)

    try:
        count = asyncio.run(run_import())
    except ValidationError as e:
        console.print(f"[red]Import rejected: {e}[/red]")
        for detail in e.errors:
            console.print(f"  • {detail}")
        ctx.exit(1)
    except CurriculumMonitorError as e:
        console.print(f"[red]Import failed: {e}[/red]")
        ctx.exit(1)

    console.print(f"[green]Imported {count} {category} rows[/green]")


@cli.command()
@click.option('--limit', default=None, type=int, help='Number of entries to show')
@click.pass_context
def logs(ctx, limit):
    """Show the most recent audit log entries."""
    config = ctx.obj['config']
    limit = limit or config.audit_log_limit

    try:
        entries = asyncio.run(CSVRecordStore(config.data_dir).fetch_audit_log(limit))
    except CurriculumMonitorError as e:
        console.print(f"[red]Cannot read audit log: {e}[/red]")
        ctx.exit(1)

    table = Table(title="Audit Log")
    table.add_column("Timestamp", style="dim")
    table.add_column("Actor", style="cyan")
    table.add_column("Action", style="green")
    table.add_column("Details")
    for entry in entries:
        table.add_row(entry.timestamp.isoformat(timespec="seconds"), entry.actor, entry.action, entry.details)
    console.print(table)


@cli.command()
@click.option('--email', prompt=True)
@click.option('--name', prompt=True)
@click.option('--role', default='FACULTY', type=click.Choice(['CHAIR', 'FACULTY', 'QA', 'ADMIN']))
@click.password_option()
@click.pass_context
def register(ctx, email, name, role, password):
    """Register a staff account."""
    service = _auth_service(ctx.obj['config'])
    try:
        profile = asyncio.run(service.register(email, password, name, role))
    except CurriculumMonitorError as e:
        console.print(f"[red]Registration failed: {e}[/red]")
        ctx.exit(1)
    console.print(f"[green]Registered {profile.email} ({profile.role.value})[/green]")


@cli.command()
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True)
@click.pass_context
def login(ctx, email, password):
    """Check credentials and print the session profile."""
    service = _auth_service(ctx.obj['config'])
    try:
        session = asyncio.run(service.login(email, password))
    except CurriculumMonitorError as e:
        console.print(f"[red]Login failed: {e}[/red]")
        ctx.exit(1)
    profile = session.profile
    console.print(f"[green]Welcome {profile.avatar} {profile.name} ({profile.role.value})[/green]")


@cli.command('reset-password')
@click.option('--email', prompt=True)
@click.pass_context
def reset_password(ctx, email):
    """Send a one-time reset code to the account's outbox."""
    service = _auth_service(ctx.obj['config'])
    try:
        asyncio.run(service.request_password_reset(email))
    except CurriculumMonitorError as e:
        console.print(f"[red]Reset failed: {e}[/red]")
        ctx.exit(1)
    console.print("[green]A reset code has been sent.[/green]")


@cli.command('change-password')
@click.option('--email', prompt=True)
@click.option('--code', prompt='Reset code')
@click.password_option('--new-password')
@click.pass_context
def change_password(ctx, email, code, new_password):
    """Set a new password using a reset code."""
    service = _auth_service(ctx.obj['config'])
    try:
        asyncio.run(service.change_password(email, new_password, code))
    except CurriculumMonitorError as e:
        console.print(f"[red]Password change failed: {e}[/red]")
        ctx.exit(1)
    console.print("[green]Password changed.[/green]")


def display_analysis_results(report: MonitorReport):
    """Display analysis results in console."""
    if report.status == "failed":
        console.print(f"[red]Analysis failed: {'; '.join(report.errors)}[/red]")
        return

    result = report.result
    style = STATUS_STYLES.get(result.status.value, "white")
    console.print(Panel.fit(
        f"[bold {style}]{result.status.value}[/bold {style}]  "
        f"overall outcome achievement {result.overall_score:.1f}%",
        title="Program Status",
        border_style=style
    ))

    if report.offline:
        console.print("[yellow]⚠ Offline: showing last known good snapshot[/yellow]")

    if result.findings:
        table = Table(title=f"Findings ({len(result.findings)})")
        table.add_column("Level")
        table.add_column("Area", style="cyan")
        table.add_column("Detail")
        for finding in result.findings:
            level_style = SEVERITY_STYLES[finding.level]
            table.add_row(f"[{level_style}]{finding.level.value}[/{level_style}]", finding.area, finding.detail)
        console.print(table)
    else:
        console.print("[green]No findings.[/green]")

    if result.actions:
        console.print("\n[bold]Action Plan[/bold]")
        for i, action in enumerate(result.actions, 1):
            colour = "red" if action.priority == Priority.URGENT else "yellow"
            console.print(f"  {i}. [{colour}]{action.priority.value}[/{colour}] {action.description}")

    console.print(f"\n[dim]Analysis completed in {report.execution_time:.2f}s[/dim]")

    if report.warnings:
        console.print("[yellow]Warnings:[/yellow]")
        for warning in report.warnings:
            console.print(f"  ⚠ {warning}")


if __name__ == '__main__':
    cli()
