"""
Conversion between tracker state and the snapshot interchange format.

A snapshot is ``{"courses": [...]}`` with the wire field names of
``services.shared.models``. Parsing is all-or-nothing: either every course
and assignment validates and a complete new state is returned, or
``SnapshotError`` is raised and nothing is built.
"""
from __future__ import annotations

import typing as t

from pydantic import ValidationError

from course_tracker.errors import SnapshotError
from course_tracker.models import Assignment, Course
from services.shared import models as wire


def assignment_to_dict(assignment: Assignment) -> dict[str, t.Any]:
    return {
        "id": assignment.id,
        "title": assignment.title,
        "dueDate": assignment.due_date,
        "weight": assignment.weight,
        "status": assignment.status,
        "grade": assignment.grade,
    }


def course_to_dict(course: Course) -> dict[str, t.Any]:
    return {
        "id": course.id,
        "name": course.name,
        "assignments": [assignment_to_dict(a) for a in course.assignments],
    }


def dump_snapshot(courses: t.Iterable[Course]) -> dict[str, t.Any]:
    """Serialize courses into a JSON-ready snapshot dict, preserving order."""
    return {"courses": [course_to_dict(c) for c in courses]}


def _assignment_from_wire(model: wire.Assignment) -> Assignment:
    return Assignment(
        id=model.id,
        title=model.title,
        due_date=model.due_date,
        weight=model.weight,
        status=model.status,
        grade=model.grade,
    )


def parse_snapshot(payload: t.Any) -> tuple[Course, ...]:
    """Validate a snapshot payload and build the courses it describes.

    :param payload: Decoded JSON, normally a dict with a ``courses`` list.
    :return: The courses, in payload order.
    :raises SnapshotError: If any part of the payload has the wrong shape or
        an id appears twice.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("courses"), list):
        raise SnapshotError("Snapshot must be an object with a 'courses' array.")

    try:
        snapshot = wire.Snapshot.model_validate(payload)
    except ValidationError as e:
        raise SnapshotError(
            f"Snapshot failed validation with {e.error_count()} error(s).",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    course_ids: set[str] = set()
    assignment_ids: set[str] = set()
    courses = []
    for course in snapshot.courses:
        if course.id in course_ids:
            raise SnapshotError(f"Duplicate course id: {course.id}")
        course_ids.add(course.id)

        for assignment in course.assignments:
            if assignment.id in assignment_ids:
                raise SnapshotError(f"Duplicate assignment id: {assignment.id}")
            assignment_ids.add(assignment.id)

        courses.append(Course(
            id=course.id,
            name=course.name,
            assignments=tuple(_assignment_from_wire(a) for a in course.assignments),
        ))

    return tuple(courses)


def count_assignments(courses: t.Iterable[Course]) -> int:
    return sum(len(c.assignments) for c in courses)
