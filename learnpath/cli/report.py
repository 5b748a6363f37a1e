"""
Typer CLI for inspecting learner progress.

Commands:
    learnpath lessons     - Effective status of every lesson, in curriculum order
    learnpath mastery     - Per-module mastery and overall completion
    learnpath activity    - Card-state histogram, weekly activity, heatmap
    learnpath init-db     - Create the progress / card-state / review-log tables

Usage:
    learnpath --help
    learnpath lessons --manifest content/manifest.json
    learnpath mastery --rule coarse
    learnpath activity --tz Europe/Amsterdam
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger
from rich import box
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from learnpath.analytics.review_stats import DayBucket, has_activity
from learnpath.content.graph import CurriculumGraph
from learnpath.content.manifest import load_manifest
from learnpath.core.errors import LearnPathError
from learnpath.core.types import DataIssue, LessonStatus
from learnpath.service import ProgressService
from learnpath.store.database import init_db, make_engine
from learnpath.store.snapshot_store import SnapshotStore

app = typer.Typer(
    help="learnpath: lesson progression, module mastery and review activity",
    no_args_is_help=True,
)

console = Console()

STATUS_STYLES = {
    LessonStatus.LOCKED: "dim",
    LessonStatus.AVAILABLE: "cyan",
    LessonStatus.IN_PROGRESS: "yellow",
    LessonStatus.COMPLETED: "green",
    LessonStatus.MASTERED: "bold magenta",
}

HEAT_GLYPHS = " ░▒▓█"


@app.callback()
def main_callback(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
) -> None:
    """Learner progress inspection."""
    settings = get_settings()
    logger.remove()
    logger.add(sys.stderr, level=(log_level or settings.log_level).upper())


# ========================================
# Context Builder
# ========================================


class CLIContext:
    """Builds the graph, store and service shared by the report commands."""

    def __init__(
        self,
        manifest: Path | None = None,
        database_url: str | None = None,
        mastery_rule: str | None = None,
        timezone: str | None = None,
    ):
        settings = get_settings()
        updates = {}
        if mastery_rule:
            updates["mastery_rule"] = mastery_rule
        if timezone:
            updates["timezone"] = timezone
        self.settings = settings.model_copy(update=updates) if updates else settings
        self.manifest = manifest or self.settings.content_manifest
        self.database_url = database_url or self.settings.database_url

    def graph(self) -> CurriculumGraph:
        if self.manifest is None:
            rprint("[red]No content manifest given (use --manifest or CONTENT_MANIFEST)[/red]")
            raise typer.Exit(code=1)
        try:
            return load_manifest(self.manifest)
        except FileNotFoundError:
            rprint(f"[red]Manifest not found:[/red] {self.manifest}")
            raise typer.Exit(code=1)
        except LearnPathError as e:
            rprint(f"[red]Invalid manifest:[/red] {e}")
            raise typer.Exit(code=1)

    def service(self) -> ProgressService:
        graph = self.graph()
        store = SnapshotStore(make_engine(self.database_url), create_tables=True)
        return ProgressService(graph, store, self.settings)


def _print_issues(issues: list[DataIssue]) -> None:
    if not issues:
        return
    console.print(f"\n[yellow]{len(issues)} record(s) skipped:[/yellow]")
    for issue in issues:
        console.print(f"  [dim]{issue.kind}[/dim] {issue.detail}")


# ========================================
# Commands
# ========================================


@app.command("lessons")
def lessons(
    manifest: Path = typer.Option(None, "--manifest", "-m", help="Content manifest (JSON)"),
    database_url: str = typer.Option(None, "--db", help="SQLAlchemy database URL"),
) -> None:
    """Show the effective status of every lesson."""
    ctx = CLIContext(manifest=manifest, database_url=database_url)
    service = ctx.service()
    overview = asyncio.run(service.lesson_overview())

    table = Table(title="Lessons", box=box.ROUNDED)
    table.add_column("#", style="cyan", justify="right", width=4)
    table.add_column("Module", style="white")
    table.add_column("Lesson", style="white")
    table.add_column("Status", justify="center")

    for idx, entry in enumerate(overview.entries, 1):
        lesson = service.graph.lesson(entry.lesson_id)
        style = STATUS_STYLES[entry.status]
        table.add_row(
            str(idx),
            entry.module_id,
            lesson.title or lesson.id,
            f"[{style}]{entry.status.value}[/{style}]",
        )

    console.print(table)
    if overview.next_lesson is not None:
        console.print(f"Next up: [bold]{overview.next_lesson.lesson_id}[/bold]")
    else:
        console.print("[dim]Nothing left to study[/dim]")
    _print_issues(overview.issues)


@app.command("mastery")
def mastery(
    manifest: Path = typer.Option(None, "--manifest", "-m", help="Content manifest (JSON)"),
    database_url: str = typer.Option(None, "--db", help="SQLAlchemy database URL"),
    rule: str = typer.Option(None, "--rule", "-r", help="Mastery rule: graded or coarse"),
) -> None:
    """Show per-module mastery and overall completion."""
    if rule is not None and rule not in ("graded", "coarse"):
        rprint(f"[red]Unknown mastery rule:[/red] {rule}")
        raise typer.Exit(code=1)

    ctx = CLIContext(manifest=manifest, database_url=database_url, mastery_rule=rule)
    service = ctx.service()
    overview = asyncio.run(service.lesson_overview())

    table = Table(title=f"Module Mastery ({ctx.settings.mastery_rule})", box=box.ROUNDED)
    table.add_column("Module", style="cyan")
    table.add_column("Done", justify="right")
    table.add_column("Mastered", justify="right")
    table.add_column("Mastery", justify="center")

    for summary in overview.masteries:
        module = service.graph.module(summary.module_id)
        level = summary.mastery
        table.add_row(
            module.title or module.id,
            f"{summary.completed_count}/{summary.lesson_count}",
            str(summary.mastered_count),
            f"[{level.color}]{level.display_name}[/{level.color}]",
        )

    console.print(table)
    completion = overview.completion
    console.print(
        f"Overall: [bold]{completion.percentage}%[/bold] "
        f"({completion.completed}/{completion.total} lessons)"
    )
    _print_issues(overview.issues)


def _heat_cell(bucket: DayBucket, peak: int) -> str:
    if bucket.count == 0 or peak == 0:
        return "·"
    level = min(len(HEAT_GLYPHS) - 1, 1 + (bucket.count * (len(HEAT_GLYPHS) - 2)) // peak)
    return HEAT_GLYPHS[level]


@app.command("activity")
def activity(
    manifest: Path = typer.Option(None, "--manifest", "-m", help="Content manifest (JSON)"),
    database_url: str = typer.Option(None, "--db", help="SQLAlchemy database URL"),
    tz: str = typer.Option(None, "--tz", help="IANA timezone for day boundaries"),
) -> None:
    """Show card states, the weekly activity chart and the heatmap."""
    ctx = CLIContext(manifest=manifest, database_url=database_url, timezone=tz)
    analytics = asyncio.run(ctx.service().review_analytics())

    states = Table(title="Card States", box=box.SIMPLE)
    states.add_column("State", style="cyan")
    states.add_column("Cards", justify="right")
    for name, count in analytics.histogram.to_dict().items():
        states.add_row(name.capitalize(), str(count))
    console.print(states)

    console.print(f"Due for review: [bold]{analytics.due_count}[/bold]")
    console.print(f"Reviews today: [bold]{analytics.today_count}[/bold]")
    console.print(f"Reviews all time: [bold]{analytics.total_reviews}[/bold]")

    if not has_activity(analytics.weekly):
        console.print("[dim]No review activity this week[/dim]")
    else:
        weekly = Table(title="This Week", box=box.SIMPLE)
        weekly.add_column("Day", style="cyan")
        weekly.add_column("Date", style="dim")
        weekly.add_column("Reviews", justify="right")
        for bucket in analytics.weekly:
            weekly.add_row(bucket.day_label, bucket.date.strftime("%Y-%m-%d"), str(bucket.count))
        console.print(weekly)

    peak = max((bucket.count for bucket in analytics.heatmap), default=0)
    cells = "".join(_heat_cell(bucket, peak) for bucket in analytics.heatmap)
    console.print(f"Last {len(analytics.heatmap)} days: [green]{cells}[/green] ({analytics.heatmap_total} reviews)")
    _print_issues(analytics.issues)


@app.command("init-db")
def init_database(
    database_url: str = typer.Option(None, "--db", help="SQLAlchemy database URL"),
) -> None:
    """
    Create the store tables.

    Safe to run multiple times (idempotent).
    """
    ctx = CLIContext(database_url=database_url)
    init_db(make_engine(ctx.database_url))
    rprint("[green]✓[/green] Progress store initialized!")
