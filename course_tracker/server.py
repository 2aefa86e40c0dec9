# -*- coding: utf-8 -*-
import typing as t

from fastmcp import FastMCP

from course_tracker import config
from course_tracker.due import display_order
from course_tracker.metrics import compute_metrics, format_percent, grade_value
from course_tracker.persistence import JsonFileBackend
from course_tracker.snapshot import assignment_to_dict, course_to_dict
from course_tracker.store import CourseStore

mcp = FastMCP("CourseTracker")

_store: t.Optional[CourseStore] = None


def get_store() -> CourseStore:
    """Returns the process-wide store, loading it from the data file on first use."""
    global _store
    if _store is None:
        _store = CourseStore(JsonFileBackend(config.DATA_FILE))
    return _store


def set_store(store: t.Optional[CourseStore]) -> None:
    global _store
    _store = store


def _assignment_fields(
        title: t.Optional[str],
        due_date: t.Optional[str],
        weight: t.Optional[float],
        status: t.Optional[str],
        grade: t.Optional[float],
) -> dict[str, t.Any]:
    fields = {
        "title": title,
        "due_date": due_date,
        "weight": weight,
        "status": status,
        "grade": grade,
    }
    return {k: v for k, v in fields.items() if v is not None}


@mcp.tool()
def list_courses() -> list[dict]:
    """Lists every course with its assignments in stored order.

    :return: A list of course objects using the snapshot field names.
    """
    return [course_to_dict(c) for c in get_store().courses]


@mcp.tool()
def add_course(name: str) -> dict:
    """Creates a course with no assignments.

    :param name: Display name of the course.
    :return: The new course.
    """
    return course_to_dict(get_store().add_course(name))


@mcp.tool()
def rename_course(course_id: str, name: str) -> t.Optional[dict]:
    """Renames a course. Does nothing if the course does not exist.

    :return: The renamed course, or None.
    """
    course = get_store().rename_course(course_id, name)
    return course_to_dict(course) if course else None


@mcp.tool()
def remove_course(course_id: str) -> bool:
    """Deletes a course and all of its assignments.

    :return: True if a course was removed.
    """
    return get_store().remove_course(course_id)


@mcp.tool()
def add_assignment(
        course_id: str,
        title: str = "",
        due_date: t.Optional[str] = None,
        weight: float = 0,
        status: str = "not_started",
        grade: t.Optional[float] = None,
) -> t.Optional[dict]:
    """Adds an assignment to a course.

    :param course_id: The course to add the assignment to.
    :param title: Title of the assignment.
    :param due_date: Due date as YYYY-MM-DD (optional).
    :param weight: Weight as a fraction (0-1) or a percentage (1-100).
    :param status: One of not_started, in_progress, completed, overdue.
    :param grade: Grade out of 100 (optional).
    :return: The new assignment, or None if the course does not exist.
    """
    fields = _assignment_fields(title, due_date, weight, status, grade)
    assignment = get_store().add_assignment(course_id, fields)
    return assignment_to_dict(assignment) if assignment else None


@mcp.tool()
def update_assignment(
        course_id: str,
        assignment_id: str,
        title: t.Optional[str] = None,
        due_date: t.Optional[str] = None,
        weight: t.Optional[float] = None,
        status: t.Optional[str] = None,
        grade: t.Optional[float] = None,
        clear_due_date: bool = False,
        clear_grade: bool = False,
) -> t.Optional[dict]:
    """Updates the given fields of an assignment; omitted fields keep their value.

    :param clear_due_date: Remove the due date instead of setting it.
    :param clear_grade: Remove the grade instead of setting it.
    :return: The updated assignment, or None if it does not exist.
    """
    patch = _assignment_fields(title, due_date, weight, status, grade)
    if clear_due_date:
        patch["due_date"] = None
    if clear_grade:
        patch["grade"] = None
    assignment = get_store().update_assignment(course_id, assignment_id, patch)
    return assignment_to_dict(assignment) if assignment else None


@mcp.tool()
def remove_assignment(course_id: str, assignment_id: str) -> bool:
    """Deletes an assignment.

    :return: True if an assignment was removed.
    """
    return get_store().remove_assignment(course_id, assignment_id)


@mcp.tool()
def course_metrics(course_id: str) -> t.Optional[dict]:
    """Computes completed weight, grade so far, current mark and total weight.

    Overdue statuses are brought up to date first.

    :return: The metrics as percentages, or None if the course does not exist.
    """
    result = get_store().course_metrics(course_id)
    if result is None:
        return None
    return {
        "completedWeighted": result.completed_weighted,
        "gradeSoFar": result.grade_so_far,
        "currentMark": result.current_mark,
        "totalWeights": result.total_weights,
        "weightsBalanced": result.weights_balanced,
    }


@mcp.tool()
def next_due_assignment(course_id: str) -> t.Optional[dict]:
    """Returns the earliest upcoming, unfinished assignment of a course."""
    assignment = get_store().next_due(course_id)
    return assignment_to_dict(assignment) if assignment else None


@mcp.tool()
def reconcile_overdue() -> int:
    """Marks every unfinished assignment whose due date has passed as overdue.

    :return: The number of assignments that changed.
    """
    return get_store().reconcile_overdue()


@mcp.tool()
def export_courses() -> dict:
    """Exports the whole tracker state as a snapshot object."""
    return get_store().export_snapshot()


@mcp.tool()
def import_courses(snapshot: dict) -> int:
    """Replaces the whole tracker state with a snapshot.

    The snapshot is rejected as a whole if any part of it is malformed.

    :return: The number of imported courses.
    """
    return len(get_store().import_snapshot(snapshot))


def format_courses() -> str:
    """Internal function to format all courses and their assignments.

    :return: Formatted overview string of every course.
    """
    store = get_store()
    store.reconcile_overdue()
    if not store.courses:
        return "📚 No courses found."

    lines = []
    lines.append("📚 COURSES")
    for course in store.courses:
        m = compute_metrics(course)
        lines.append("=" * 100)
        lines.append(
            f"{course.name}  |  Completed: {format_percent(m.completed_weighted)}  "
            f"|  Grade So Far: {format_percent(m.grade_so_far)}  "
            f"|  Current Mark: {format_percent(m.current_mark)}"
        )
        if not m.weights_balanced:
            lines.append(f"⚠️  Weights sum to {format_percent(m.total_weights)}, not 100%")
        lines.append("-" * 100)
        if not course.assignments:
            lines.append("No assignments yet.")
            continue
        lines.append(f"{'#':<4} {'Title':<35} {'Due':<12} {'Status':<13} {'Weight':<8} {'Grade':<6}")
        for idx, a in enumerate(display_order(course.assignments), 1):
            title = a.display_title[:34]
            grade = grade_value(a)
            grade = "—" if grade is None else f"{grade:g}"
            lines.append(
                f"{idx:<4} {title:<35} {a.due_date or '—':<12} {a.status:<13} "
                f"{a.weight!s:<8} {grade:<6}"
            )

    lines.append("=" * 100)
    lines.append(f"Total: {len(store.courses)} course(s)")
    return "\n".join(lines)


@mcp.tool()
def show_courses() -> str:
    """Displays every course with its metrics and assignments in a formatted view.

    Assignments are listed by due date with undated ones last. A warning line
    is shown for courses whose weights do not add up to 100%.

    :return: Formatted string of all courses, or a message if there are none.
    """
    return format_courses()


if __name__ == "__main__":
    mcp.run()
