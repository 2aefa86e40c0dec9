# -*- coding: utf-8 -*-
import json
import typing as t
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from course_tracker import config
from course_tracker.due import display_order
from course_tracker.errors import InvalidFieldError, SnapshotError
from course_tracker.metrics import all_courses_complete, format_percent, grade_value
from course_tracker.models import ASSIGNMENT_STATUSES, Course
from course_tracker.persistence import JsonFileBackend
from course_tracker.snapshot import count_assignments
from course_tracker.store import CourseStore

console = Console()
err_console = Console(stderr=True)

STATUS_STYLES = {
    "not_started": "white",
    "in_progress": "cyan",
    "completed": "green",
    "overdue": "bold red",
}


def _store(ctx: click.Context) -> CourseStore:
    return ctx.obj["store"]


def _require_course(store: CourseStore, course_id: str) -> Course:
    course = store.get_course(course_id)
    if course is None:
        err_console.print(f"[red]Error:[/red] No course with id '{course_id}'.")
        raise SystemExit(1)
    return course


def create_courses_table(store: CourseStore) -> Table:
    """Create a summary table with one row per course."""
    table = Table(title="📚 Courses", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Course", style="white")
    table.add_column("Completed", justify="right", style="green")
    table.add_column("Grade So Far", justify="right", style="cyan")
    table.add_column("Current Mark", justify="right")
    table.add_column("Next Due", style="yellow")

    for course in store.courses:
        m = store.course_metrics(course.id)
        upcoming = store.next_due(course.id)
        table.add_row(
            course.id,
            course.name,
            format_percent(m.completed_weighted),
            format_percent(m.grade_so_far),
            format_percent(m.current_mark),
            f"{upcoming.display_title} on {upcoming.due_date}" if upcoming else "No upcoming deadlines",
        )
    return table


def create_assignments_table(course: Course) -> Table:
    """Create a table of a course's assignments ordered by due date."""
    table = Table(title=f"🗓️  {course.name}", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="white")
    table.add_column("Due", style="yellow")
    table.add_column("Status")
    table.add_column("Weight", justify="right")
    table.add_column("Grade", justify="right")

    for a in display_order(course.assignments):
        grade = grade_value(a)
        table.add_row(
            a.id,
            a.display_title,
            a.due_date or "—",
            Text(a.status, style=STATUS_STYLES.get(a.status, "white")),
            str(a.weight),
            "—" if grade is None else f"{grade:g}",
        )
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Snapshot file to use (default: $COURSE_TRACKER_DATA_FILE or ~/.course_tracker).",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, data_file: t.Optional[Path], verbose: bool) -> None:
    """Track courses, assignments, due dates and grade weights."""
    config.configure_logging("DEBUG" if verbose else None)
    store = CourseStore(JsonFileBackend(data_file or config.DATA_FILE))
    ctx.obj = {"store": store}
    ctx.call_on_close(store.close)


@cli.command()
@click.pass_context
def courses(ctx: click.Context) -> None:
    """List every course with its metrics and next deadline."""
    store = _store(ctx)
    if not store.courses:
        console.print("[yellow]No courses yet.[/yellow] Add one with 'add-course'.")
        return
    console.print(create_courses_table(store))
    if all_courses_complete(store.courses):
        console.print(Panel("Every course is 100% complete. 🎉", border_style="green"))


@cli.command()
@click.argument("course_id")
@click.pass_context
def show(ctx: click.Context, course_id: str) -> None:
    """Show one course: metrics, weight check and assignments.

    COURSE_ID: The id printed by 'courses'.
    """
    store = _store(ctx)
    _require_course(store, course_id)
    m = store.course_metrics(course_id)
    course = store.get_course(course_id)

    stats_text = Text()
    stats_text.append("Completed (weighted): ", style="white")
    stats_text.append(format_percent(m.completed_weighted), style="bold green")
    stats_text.append("\nTotal weights: ", style="white")
    stats_text.append(format_percent(m.total_weights), style="bold")
    stats_text.append("\nGrade So Far: ", style="white")
    stats_text.append(format_percent(m.grade_so_far), style="bold cyan")
    stats_text.append("  (average over completed work only)", style="dim")
    stats_text.append("\nCurrent Mark: ", style="white")
    stats_text.append(format_percent(m.current_mark), style="bold")
    stats_text.append("  (counts missing as 0)", style="dim")
    if not m.weights_balanced:
        stats_text.append("\n⚠️  Weights do not sum to 100%", style="yellow")

    console.print(Panel(stats_text, title=f"📊 {course.name}", border_style="green"))
    if course.assignments:
        console.print(create_assignments_table(course))
    else:
        console.print("[dim]No assignments yet.[/dim]")


@cli.command("add-course")
@click.argument("name")
@click.pass_context
def add_course(ctx: click.Context, name: str) -> None:
    """Create a course."""
    course = _store(ctx).add_course(name)
    console.print(f"[green]✓[/green] Added course [bold]{course.name}[/bold] ({course.id})")


@cli.command("rename-course")
@click.argument("course_id")
@click.argument("name")
@click.pass_context
def rename_course(ctx: click.Context, course_id: str, name: str) -> None:
    """Rename a course."""
    store = _store(ctx)
    _require_course(store, course_id)
    store.rename_course(course_id, name)
    console.print(f"[green]✓[/green] Renamed course to [bold]{name}[/bold]")


@cli.command("remove-course")
@click.argument("course_id")
@click.confirmation_option(prompt="Delete this course and all of its assignments?")
@click.pass_context
def remove_course(ctx: click.Context, course_id: str) -> None:
    """Delete a course and all of its assignments."""
    store = _store(ctx)
    _require_course(store, course_id)
    store.remove_course(course_id)
    console.print("[green]✓[/green] Course removed")


def _assignment_options(func: t.Callable) -> t.Callable:
    func = click.option("--grade", type=float, default=None, help="Grade out of 100.")(func)
    func = click.option(
        "--status", type=click.Choice(ASSIGNMENT_STATUSES), default=None, help="Assignment status."
    )(func)
    func = click.option(
        "--weight", type=float, default=None, help="Weight as a fraction (0-1) or percentage (1-100)."
    )(func)
    func = click.option("--due", "due_date", default=None, help="Due date (YYYY-MM-DD).")(func)
    func = click.option("--title", default=None, help="Assignment title.")(func)
    return func


def _collect_fields(**values: t.Any) -> dict[str, t.Any]:
    return {k: v for k, v in values.items() if v is not None}


@cli.command("add-assignment")
@click.argument("course_id")
@_assignment_options
@click.pass_context
def add_assignment(ctx: click.Context, course_id: str, **values: t.Any) -> None:
    """Add an assignment to a course."""
    store = _store(ctx)
    _require_course(store, course_id)
    try:
        assignment = store.add_assignment(course_id, _collect_fields(**values))
    except InvalidFieldError as e:
        raise click.BadParameter(e.message)
    console.print(
        f"[green]✓[/green] Added [bold]{assignment.display_title}[/bold] ({assignment.id})"
    )


@cli.command("update-assignment")
@click.argument("course_id")
@click.argument("assignment_id")
@_assignment_options
@click.option("--clear-due", is_flag=True, help="Remove the due date.")
@click.option("--clear-grade", is_flag=True, help="Remove the grade.")
@click.pass_context
def update_assignment(
        ctx: click.Context,
        course_id: str,
        assignment_id: str,
        clear_due: bool,
        clear_grade: bool,
        **values: t.Any,
) -> None:
    """Change fields of an assignment; fields not given keep their value."""
    store = _store(ctx)
    patch = _collect_fields(**values)
    if clear_due:
        patch["due_date"] = None
    if clear_grade:
        patch["grade"] = None
    try:
        assignment = store.update_assignment(course_id, assignment_id, patch)
    except InvalidFieldError as e:
        raise click.BadParameter(e.message)
    if assignment is None:
        err_console.print(f"[red]Error:[/red] No assignment '{assignment_id}' in course '{course_id}'.")
        raise SystemExit(1)
    console.print(
        f"[green]✓[/green] Updated [bold]{assignment.display_title}[/bold] "
        f"([{STATUS_STYLES[assignment.status]}]{assignment.status}[/])"
    )


@cli.command("remove-assignment")
@click.argument("course_id")
@click.argument("assignment_id")
@click.pass_context
def remove_assignment(ctx: click.Context, course_id: str, assignment_id: str) -> None:
    """Delete an assignment."""
    if not _store(ctx).remove_assignment(course_id, assignment_id):
        err_console.print(f"[red]Error:[/red] No assignment '{assignment_id}' in course '{course_id}'.")
        raise SystemExit(1)
    console.print("[green]✓[/green] Assignment removed")


@cli.command()
@click.pass_context
def reconcile(ctx: click.Context) -> None:
    """Mark every unfinished assignment whose due date has passed as overdue."""
    changed = _store(ctx).reconcile_overdue()
    console.print(f"[green]✓[/green] {changed} assignment(s) marked overdue")


@cli.command("export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path), default=config.DEFAULT_EXPORT_FILE)
@click.pass_context
def export_courses(ctx: click.Context, path: Path) -> None:
    """Write all courses to a JSON file.

    PATH: Output file (default: courses_export.json).
    """
    snapshot = _store(ctx).export_snapshot()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, indent=2, ensure_ascii=False)
    console.print(f"[green]✓[/green] Exported {len(snapshot['courses'])} course(s) to {path}")


@cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_courses(ctx: click.Context, path: Path) -> None:
    """Replace all courses with the contents of a JSON export.

    Nothing changes if the file is not a valid export.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] Could not parse JSON: {e}")
        raise SystemExit(1)
    try:
        imported = _store(ctx).import_snapshot(payload)
    except SnapshotError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise SystemExit(1)
    console.print(
        f"[green]✓[/green] Imported {len(imported)} course(s) "
        f"and {count_assignments(imported)} assignment(s)"
    )


if __name__ == "__main__":
    cli()
