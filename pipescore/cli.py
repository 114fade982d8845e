"""CLI entry point: load roster, audit every repo, write the leaderboard."""

import logging
from datetime import datetime, timezone
from pathlib import Path

import click
import typer

from .config import ConfigError, Settings, load_settings
from .fleet import audit_roster
from .format import format_audit, format_leaderboard, format_markdown
from .leaderboard import build_leaderboard
from .probes.registry import build_registry
from .roster import load_roster
from .scanner.github import GitHubClient

logger = logging.getLogger("pipescore")

app = typer.Typer(help="Audit team repositories against a CI/CD maturity rubric.")


def _err(msg: str) -> None:
    """Print a red diagnostic to stderr and exit 2. Used for all CLI errors."""
    typer.echo(click.style(f"Error: {msg}", fg="red"), err=True)
    raise typer.Exit(2)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def _make_client(settings: Settings) -> GitHubClient:
    return GitHubClient(
        token=settings.token,
        api_base=settings.api_base,
        timeout=settings.request_timeout,
        retries=settings.retries,
    )


@app.command("run")
def run_cmd(
    roster_path: Path = typer.Argument(Path("teams.json"), help="Roster JSON: [{team, members, repo, deploy_url}]"),
    output: Path = typer.Option(Path("docs/scores.json"), "--output", "-o", help="Leaderboard JSON destination"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    json_out: bool = typer.Option(False, "--json", "-j", help="Print the leaderboard JSON to stdout"),
    markdown_out: bool = typer.Option(False, "--markdown", "-m", help="Print the leaderboard as Markdown"),
    workers: int | None = typer.Option(None, "--workers", "-w", help="Repositories audited in parallel"),
    deadline: float | None = typer.Option(
        None, "--deadline",
        help="Stop waiting for unfinished audits after N seconds. Requests already in flight "
        "still run to their own timeout before the process exits.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and probe ids in output"),
) -> None:
    """Audit every repository in the roster and write the leaderboard."""
    started_at = datetime.now(timezone.utc)
    try:
        settings = load_settings(
            config_path,
            concurrency=workers,
            deadline=deadline,
            log_level="DEBUG" if verbose else None,
        )
        roster = load_roster(roster_path)
        registry = build_registry(settings.extra_probes, deploy_timeout_ms=settings.deploy_timeout_ms)
    except ConfigError as e:
        _err(str(e))
    except ValueError as e:
        _err(f"Invalid probe registry: {e}")

    _setup_logging(settings.log_level)
    logger.info("Auditing %d team(s) against %d probes (%d pts)", len(roster), len(registry), registry.total_possible)

    quiet = json_out or markdown_out

    def _progress(audit) -> None:
        logger.info("Scored %s: %d/%d", audit.team_name, audit.total_awarded, audit.total_possible)
        if not quiet:
            typer.echo(format_audit(audit, verbose=verbose))

    audits = audit_roster(
        _make_client(settings),
        registry,
        roster,
        concurrency=settings.concurrency,
        deadline=settings.deadline,
        probe_workers=settings.probe_workers,
        on_audit=_progress,
    )
    doc = build_leaderboard(audits, registry, generated_at=started_at)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(doc.to_json() + "\n", encoding="utf-8")
    typer.echo(f"Scores written to {output}", err=True)

    if json_out:
        typer.echo(doc.to_json())
    elif markdown_out:
        typer.echo(format_markdown(doc))
    else:
        typer.echo(format_leaderboard(doc))


@app.command("explain")
def explain_cmd(
    probe_id: str = typer.Argument("list", help="Probe id, or 'list'"),
) -> None:
    """Describe a probe: points, category, what passes, how to fix."""
    registry = build_registry()
    if probe_id in ("list", "probes"):
        typer.echo("Available probes:")
        for p in registry:
            typer.echo(f"  {p.id:<20} {p.points:>3} pts  {p.category.value:<13} {p.label}")
        typer.echo(f"\nTotal: {registry.total_possible} pts")
        typer.echo("Use: pipescore explain <probe_id>")
        return
    probe = registry.get(probe_id)
    if probe is None:
        _err(f"Unknown probe: {probe_id}\nAvailable: {', '.join(registry.ids)}")
    typer.echo(f"Probe: {probe.id}")
    typer.echo(f"Label: {probe.label}")
    typer.echo(f"Points: {probe.points}")
    typer.echo(f"Category: {probe.category.value}")
    typer.echo(f"Passes when: {probe.description}")
    typer.echo(f"Fix: {probe.fix}")


def _main() -> None:
    app()


if __name__ == "__main__":
    _main()
