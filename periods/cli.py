"""
Command-line interface for period assignments.

Usage:
    python -m periods resolve 15:30
    python -m periods expand schedule.json
    python -m periods validate schedule.json
    python -m periods periods schedule.json --teacher T001 --class C001 --day monday
    python -m periods access schedule.json --teacher T001 --class C001 --day monday --period 2
    python -m periods daily schedule.json --teacher T001 --date 2024-09-02
    python -m periods class-teachers schedule.json --class C001 --day monday
    python -m periods cache schedule.json preload invalidate --class C001
"""

from __future__ import annotations

import asyncio
import datetime as dt
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .data.loader import DataValidationError, convert_keys_to_snake_case, load_schedule_data, validate_schedule_data
from .data.models import DAY_NAMES, CacheConfig, Session
from .data.source import DataAccessError, InMemoryRowSource, RowSource, SQLiteRowSource
from .expander import expand_rows
from .output.formatters import (
    assignments_table,
    cache_stats_table,
    class_summary_table,
    class_teachers_table,
    format_csv,
    format_json,
)
from .service import PeriodAssignmentService, TeacherNotFoundError
from .timetable import period_to_time, resolve_slot, session_for_time, time_to_period

# Create Typer app
app = typer.Typer(
    name="periods",
    help="Teacher period assignments: resolve, expand, query and cache.",
    add_completion=False,
)

# Rich console for pretty output
console = Console()

SQLITE_SUFFIXES = {".db", ".sqlite", ".sqlite3"}
OUTPUT_FORMATS = ("table", "json", "csv")
CACHE_ACTIONS = ("clear", "cleanup", "invalidate", "warmup", "preload", "reset-stats")


# =============================================================================
# Helper Functions
# =============================================================================

def open_source(data_path: Path) -> RowSource:
    """Open a JSON file or SQLite database as a row source."""
    if not data_path.exists():
        console.print(f"[red]Error:[/red] Data file not found: {data_path}")
        raise typer.Exit(code=1)

    if data_path.suffix.lower() in SQLITE_SUFFIXES:
        return SQLiteRowSource(data_path)

    try:
        return InMemoryRowSource(load_schedule_data(data_path))
    except (json.JSONDecodeError, DataValidationError) as e:
        console.print(f"[red]Error loading data:[/red] {e}")
        raise typer.Exit(code=1)


def check_day(day: str) -> str:
    day = day.strip().lower()
    if day not in DAY_NAMES:
        console.print(f"[red]Error:[/red] Invalid day '{day}'")
        console.print(f"Valid days: {', '.join(DAY_NAMES)}")
        raise typer.Exit(code=1)
    return day


def check_format(output_format: str) -> str:
    if output_format not in OUTPUT_FORMATS:
        console.print(f"[red]Error:[/red] Unknown format '{output_format}'")
        raise typer.Exit(code=1)
    return output_format


def split_list(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def run_query(coro):
    """Run a service coroutine, turning data errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except TeacherNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    except DataAccessError as e:
        console.print(f"[red]Data access failed:[/red] {e}")
        raise typer.Exit(code=1)


@app.callback()
def configure(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Teacher period assignments: resolve, expand, query and cache."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# =============================================================================
# Commands
# =============================================================================

@app.command()
def resolve(
    value: str = typer.Argument(
        ...,
        help="Time of day (HH:MM) or a period number",
    ),
    session: Session = typer.Option(
        Session.MORNING,
        "--session", "-s",
        help="Session for a period number",
        case_sensitive=False,
    ),
) -> None:
    """
    Resolve a time to its period, or a period to its canonical times.

    Examples:
        python -m periods resolve 15:30
        python -m periods resolve 4 --session afternoon
    """
    if ":" not in value:
        try:
            period_number = int(value)
        except ValueError:
            console.print(f"[red]Error:[/red] Expected HH:MM or a period number, got '{value}'")
            raise typer.Exit(code=1)
        times = period_to_time(period_number, session)
        console.print(
            f"{session.value.capitalize()} period {period_number}: "
            f"{times.start_time} - {times.end_time}"
        )
        return

    try:
        slot = resolve_slot(value)
        period_number = time_to_period(value)
        row_session = session_for_time(value)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    times = period_to_time(period_number, row_session)
    console.print(
        f"{value} -> {row_session.value.capitalize()} period {period_number} "
        f"({times.start_time} - {times.end_time})"
    )
    if slot is None:
        console.print("[yellow]Not inside any period; fell back to period 1[/yellow]")


@app.command()
def expand(
    data_file: Path = typer.Argument(
        ...,
        help="Path to schedule JSON file",
    ),
    output_format: str = typer.Option(
        "table",
        "--format", "-f",
        help="Output format: table, json or csv",
    ),
) -> None:
    """
    Expand every schedule row into its period assignments.

    Example:
        python -m periods expand schedule.json --format csv
    """
    output_format = check_format(output_format)
    if not data_file.exists():
        console.print(f"[red]Error:[/red] Data file not found: {data_file}")
        raise typer.Exit(code=1)
    try:
        data = load_schedule_data(data_file)
    except (json.JSONDecodeError, DataValidationError) as e:
        console.print(f"[red]Error loading data:[/red] {e}")
        raise typer.Exit(code=1)

    assignments = []
    for day in DAY_NAMES:
        assignments.extend(expand_rows([r for r in data.schedule_entries if r.day_of_week == day]))

    if output_format == "json":
        console.print_json(format_json(assignments))
    elif output_format == "csv":
        console.print(format_csv(assignments), end="", markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(assignments_table(assignments, title="Period Assignments"))


@app.command()
def validate(
    data_file: Path = typer.Argument(
        ...,
        help="Path to schedule JSON file to validate",
    ),
) -> None:
    """
    Validate a schedule JSON file.

    Checks for:
    - Valid JSON structure
    - Required sections and reference integrity
    - Row-level field validation

    Example:
        python -m periods validate schedule.json
    """
    console.print(f"\n[bold]Validating:[/bold] {data_file}\n")

    if not data_file.exists():
        console.print(f"[red]Error:[/red] File not found: {data_file}")
        raise typer.Exit(code=1)

    console.print("[cyan]1. Checking JSON syntax...[/cyan]")
    try:
        with open(data_file) as f:
            raw_data = json.load(f)
        console.print("   [green]JSON syntax is valid[/green]")
    except json.JSONDecodeError as e:
        console.print(f"   [red]Invalid JSON:[/red] {e}")
        raise typer.Exit(code=1)

    console.print("[cyan]2. Checking references...[/cyan]")
    try:
        validate_schedule_data(convert_keys_to_snake_case(raw_data))
        console.print("   [green]References are consistent[/green]")
    except DataValidationError as e:
        console.print("   [red]Validation failed:[/red]")
        for line in str(e).split("; "):
            console.print(f"   - {line}")
        raise typer.Exit(code=1)

    console.print("[cyan]3. Validating rows...[/cyan]")
    try:
        data = load_schedule_data(data_file)
        console.print("   [green]All rows valid[/green]")
    except DataValidationError as e:
        console.print("   [red]Row validation failed:[/red]")
        for line in str(e).split("\n"):
            console.print(f"   {line}")
        raise typer.Exit(code=1)

    summary = data.summary()
    table = Table(show_header=False, box=None)
    table.add_column("Entity", style="cyan")
    table.add_column("Count", style="white")
    table.add_row("Teachers", str(summary["teachers"]))
    table.add_row("Classes", str(summary["classes"]))
    table.add_row("Schedule entries", str(summary["schedule_entries"]))
    table.add_row("Total hours", str(summary["total_hours"]))
    table.add_row("Days", ", ".join(summary["days"]) or "-")

    console.print("\n[bold]Summary:[/bold]")
    console.print(table)
    console.print("\n[green]Validation complete.[/green]\n")


@app.command()
def periods(
    data_file: Path = typer.Argument(..., help="Schedule JSON file or SQLite database"),
    teacher: str = typer.Option(..., "--teacher", "-T", help="Teacher ID"),
    class_id: str = typer.Option(..., "--class", "-C", help="Class ID"),
    day: str = typer.Option(..., "--day", "-D", help="Day of week (monday, tuesday, ...)"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json or csv"),
) -> None:
    """
    Show a teacher's periods for a class on a day.

    Example:
        python -m periods periods schedule.json -T T001 -C C001 -D monday
    """
    output_format = check_format(output_format)
    day = check_day(day)
    service = PeriodAssignmentService(open_source(data_file))
    assignments = run_query(service.get_teacher_periods(teacher, class_id, day))

    if output_format == "json":
        console.print_json(format_json(assignments))
    elif output_format == "csv":
        console.print(format_csv(assignments), end="", markup=False, highlight=False, soft_wrap=True)
    elif not assignments:
        console.print(f"[yellow]No periods for teacher {teacher} in class {class_id} on {day}[/yellow]")
    else:
        console.print(assignments_table(assignments, title=f"{teacher} / {class_id} / {day.capitalize()}"))


@app.command()
def access(
    data_file: Path = typer.Argument(..., help="Schedule JSON file or SQLite database"),
    teacher: str = typer.Option(..., "--teacher", "-T", help="Teacher ID"),
    class_id: str = typer.Option(..., "--class", "-C", help="Class ID"),
    day: str = typer.Option(..., "--day", "-D", help="Day of week"),
    period: int = typer.Option(..., "--period", "-P", help="Period number (1-6)", min=1, max=6),
) -> None:
    """
    Check whether a teacher may mark a period. Exits 1 when not allowed.

    Example:
        python -m periods access schedule.json -T T001 -C C001 -D monday -P 2
    """
    day = check_day(day)
    service = PeriodAssignmentService(open_source(data_file))
    allowed = asyncio.run(service.validate_teacher_period_access(teacher, class_id, period, day))

    if allowed:
        console.print(f"[green]Allowed:[/green] {teacher} teaches {class_id} period {period} on {day}")
    else:
        console.print(f"[red]Denied:[/red] {teacher} is not assigned {class_id} period {period} on {day}")
        raise typer.Exit(code=1)


@app.command()
def daily(
    data_file: Path = typer.Argument(..., help="Schedule JSON file or SQLite database"),
    teacher: str = typer.Option(..., "--teacher", "-T", help="Teacher ID"),
    date: Optional[str] = typer.Option(None, "--date", help="Date as YYYY-MM-DD (default: today)"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json or csv"),
) -> None:
    """
    Show a teacher's schedule across all classes for a date.

    Example:
        python -m periods daily schedule.json -T T001 --date 2024-09-02
    """
    output_format = check_format(output_format)
    try:
        day_date = dt.date.fromisoformat(date) if date else dt.date.today()
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid date '{date}', expected YYYY-MM-DD")
        raise typer.Exit(code=1)

    service = PeriodAssignmentService(open_source(data_file))
    schedule = run_query(service.get_teacher_daily_schedule(teacher, day_date))

    if output_format == "json":
        console.print_json(format_json(schedule))
        return
    if output_format == "csv":
        console.print(format_csv(schedule.assignments), end="", markup=False, highlight=False, soft_wrap=True)
        return

    console.print(Panel(
        Text(f"{schedule.teacher_name} ({schedule.teacher_id})", style="bold"),
        title="Teacher Schedule",
        subtitle=f"{schedule.day_of_week.capitalize()} {schedule.date.isoformat()}",
    ))
    if not schedule.assignments:
        console.print("[yellow]No periods scheduled[/yellow]")
        return
    console.print(assignments_table(schedule.assignments))
    console.print(class_summary_table(schedule))
    console.print(f"Total periods: {schedule.total_periods}")


@app.command("class-teachers")
def class_teachers(
    data_file: Path = typer.Argument(..., help="Schedule JSON file or SQLite database"),
    class_id: str = typer.Option(..., "--class", "-C", help="Class ID"),
    day: str = typer.Option(..., "--day", "-D", help="Day of week"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table or json"),
) -> None:
    """
    List the teachers of a class on a day with their periods and subjects.

    Example:
        python -m periods class-teachers schedule.json -C C001 -D monday
    """
    output_format = check_format(output_format)
    if output_format == "csv":
        console.print("[red]Error:[/red] class-teachers supports table or json output")
        raise typer.Exit(code=1)
    day = check_day(day)
    service = PeriodAssignmentService(open_source(data_file))
    teachers = run_query(service.get_class_teachers(class_id, day))

    if output_format == "json":
        console.print_json(format_json(teachers))
    elif not teachers:
        console.print(f"[yellow]No teachers for class {class_id} on {day}[/yellow]")
    else:
        console.print(class_teachers_table(teachers, title=f"{class_id} / {day.capitalize()}"))


@app.command()
def cache(
    data_file: Path = typer.Argument(..., help="Schedule JSON file or SQLite database"),
    actions: list[str] = typer.Argument(
        ...,
        help=f"Actions to run in order: {', '.join(CACHE_ACTIONS)}",
    ),
    teacher: Optional[str] = typer.Option(None, "--teacher", "-T", help="Teacher filter for invalidate/clear"),
    class_id: Optional[str] = typer.Option(None, "--class", "-C", help="Class filter for invalidate/clear"),
    day: Optional[str] = typer.Option(None, "--day", "-D", help="Day filter for invalidate/clear"),
    teachers: Optional[str] = typer.Option(None, "--teachers", help="Comma-separated teacher IDs to preload"),
    classes: Optional[str] = typer.Option(None, "--classes", help="Comma-separated class IDs to preload"),
    days: Optional[str] = typer.Option(None, "--days", help="Comma-separated days to preload"),
    max_size: Optional[int] = typer.Option(None, "--max-size", help="Cache capacity", min=1),
) -> None:
    """
    Run cache-management actions against a fresh service and show the stats.

    Preload defaults to every active teacher, every class and every day.

    Examples:
        python -m periods cache schedule.json preload
        python -m periods cache schedule.json preload invalidate --class C001
        python -m periods cache schedule.json warmup cleanup reset-stats
    """
    for action in actions:
        if action not in CACHE_ACTIONS:
            console.print(f"[red]Error:[/red] Invalid action '{action}'")
            console.print(f"Valid actions: {', '.join(CACHE_ACTIONS)}")
            raise typer.Exit(code=1)
    if day:
        day = check_day(day)
    preload_days = [check_day(d) for d in split_list(days)] or list(DAY_NAMES)

    config = CacheConfig.from_env()
    if max_size is not None:
        config = config.model_copy(update={"max_size": max_size})
    service = PeriodAssignmentService(open_source(data_file), config=config)

    async def run_actions() -> None:
        for action in actions:
            if action == "clear":
                service.clear_cache(teacher, class_id, day)
                console.print("Cache cleared")
            elif action == "cleanup":
                count = service.cleanup_expired_entries()
                console.print(f"Cleaned up {count} expired entries")
            elif action == "invalidate":
                count = service.invalidate_schedule_cache(class_id=class_id, teacher_id=teacher, day_of_week=day)
                console.print(f"Invalidated {count} entries")
            elif action == "warmup":
                result = await service.warmup_cache()
                console.print(f"Warmup: {result.success} loaded, {result.failed} failed")
            elif action == "preload":
                teacher_ids = split_list(teachers) or await service.source.list_teacher_ids()
                class_ids = split_list(classes) or await service.source.list_class_ids()
                count = await service.preload_cache(teacher_ids, class_ids, preload_days)
                console.print(f"Preloaded {count} entries")
            elif action == "reset-stats":
                service.reset_cache_stats()
                console.print("Statistics reset")

    run_query(run_actions())
    console.print(cache_stats_table(service.get_cache_stats()))


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
