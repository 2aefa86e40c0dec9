"""
Data models for the course tracker.

This module contains the dataclasses used to represent courses and their
assignments. Instances are immutable: the store produces a new version of an
entity for every change instead of editing it in place.
"""
from __future__ import annotations

import typing as t
from dataclasses import dataclass, field

AssignmentStatus = t.Literal["not_started", "in_progress", "completed", "overdue"]

NOT_STARTED: AssignmentStatus = "not_started"
IN_PROGRESS: AssignmentStatus = "in_progress"
COMPLETED: AssignmentStatus = "completed"
OVERDUE: AssignmentStatus = "overdue"

ASSIGNMENT_STATUSES: tuple[str, ...] = (NOT_STARTED, IN_PROGRESS, COMPLETED, OVERDUE)

# Fields a caller may set on an assignment; ``id`` is owned by the store.
ASSIGNMENT_FIELDS: tuple[str, ...] = ("title", "due_date", "weight", "status", "grade")

UNTITLED = "Untitled"


@dataclass(frozen=True)
class Assignment:
    """A graded deliverable belonging to exactly one course.

    ``weight`` is stored exactly as entered (fraction or percent) and is only
    normalized when read. ``due_date`` is an ISO calendar date (``YYYY-MM-DD``)
    or None when there is no deadline.
    """
    id: str
    title: str = ""
    due_date: t.Optional[str] = None
    weight: float = 0
    status: AssignmentStatus = NOT_STARTED
    grade: t.Optional[float] = None

    @property
    def display_title(self) -> str:
        return self.title or UNTITLED


@dataclass(frozen=True)
class Course:
    """A course and the assignments it owns, in insertion order."""
    id: str
    name: str
    assignments: tuple[Assignment, ...] = field(default_factory=tuple)

    def find_assignment(self, assignment_id: str) -> t.Optional[Assignment]:
        for assignment in self.assignments:
            if assignment.id == assignment_id:
                return assignment
        return None
