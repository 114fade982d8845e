"""Terminal output formatting: per-team box view and Markdown table."""

import shutil
from typing import List

import click

from .models import LeaderboardDocument, RepositoryAudit


def _get_width() -> int:
    try:
        return min(72, shutil.get_terminal_size((72, 24)).columns)
    except OSError:
        return 72


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: max(0, width - 1)] + "…"


def _score_color(awarded: int, possible: int) -> str:
    pct = 100 * awarded / possible if possible else 0
    if pct >= 70:
        return "green"
    if pct >= 40:
        return "yellow"
    return "red"


def format_audit(audit: RepositoryAudit, verbose: bool = False) -> str:
    """Per-team progress block: one line per probe. ● = passed, ○ = failed."""
    width = _get_width()
    lines = [click.style(f" {audit.team_name} ({audit.repo_identifier})", bold=True)]
    for probe_id, r in audit.results.items():
        bullet = "●" if r.passed else "○"
        name = f"{r.label} [{probe_id}]" if verbose else r.label
        line = f"  {bullet} {name} ({r.awarded_points}/{r.points}) {r.detail}"
        lines.append(click.style(_truncate(line, width), fg="green" if r.passed else "red", dim=not r.passed))
    total = f"  Total {audit.total_awarded}/{audit.total_possible}"
    lines.append(click.style(total, fg=_score_color(audit.total_awarded, audit.total_possible)))
    return "\n".join(lines)


def format_leaderboard(doc: LeaderboardDocument) -> str:
    """Build the human leaderboard as a single string."""
    width = _get_width()
    lines: List[str] = []

    lines.append("┌" + "─" * (width - 2) + "┐")
    lines.append(" pipescore · CI/CD leaderboard")
    lines.append("─" * width)
    if not doc.entries:
        lines.append(" No teams in roster.")
    for e in doc.entries:
        a = e.audit
        row = f" #{e.rank:<3} {_truncate(a.team_name, width - 24):<{width - 24}} {a.total_awarded:>4}/{doc.total_possible} pts"
        lines.append(click.style(row, fg=_score_color(a.total_awarded, doc.total_possible)))
    lines.append("─" * width)
    footer = f" Generated {doc.generated_at.strftime('%Y-%m-%d %H:%M UTC')}  ·  ties keep roster order"
    lines.append(click.style(_truncate(footer, width), dim=True))
    lines.append("└" + "─" * (width - 2) + "┘")
    return "\n".join(lines)


def format_markdown(doc: LeaderboardDocument) -> str:
    """Markdown table for READMEs and PR comments."""
    lines = [
        "# CI/CD leaderboard",
        "",
        f"_Generated {doc.generated_at.isoformat().replace('+00:00', 'Z')}_",
        "",
        "| Rank | Team | Repo | Score |",
        "|---:|---|---|---:|",
    ]
    for e in doc.entries:
        a = e.audit
        lines.append(f"| {e.rank} | {a.team_name} | `{a.repo_identifier}` | {a.total_awarded}/{doc.total_possible} |")
    for e in doc.entries:
        a = e.audit
        lines.append("")
        lines.append(f"## #{e.rank} {a.team_name}")
        for r in a.results.values():
            mark = "x" if r.passed else " "
            lines.append(f"- [{mark}] **{r.label}** ({r.awarded_points}/{r.points}): {r.detail}")
    return "\n".join(lines)
