"""
Progress and grade metrics for a course.

All figures are percentages of the whole course and are recomputed from the
assignments every time they are asked for:

- ``total_weights``: normalized weight of every assignment. Can exceed 100
  when the weights were entered inconsistently; that is reported, not fixed.
- ``completed_weighted``: normalized weight of the completed assignments,
  graded or not.
- ``current_mark``: the mark the student holds right now if every ungraded
  assignment scored zero.
- ``grade_so_far``: the weighted average over completed work. Completed work
  without a grade still counts in the denominator, which pulls the average
  down until a grade is entered. None until some weight is completed.
"""
from __future__ import annotations

import math
import numbers
import typing as t
from dataclasses import dataclass

from course_tracker.models import COMPLETED, Assignment, Course
from course_tracker.weights import normalize_weight

# Tolerance used when checking that a course's weights add up to 100%.
WEIGHT_SUM_TOLERANCE = 0.01


@dataclass(frozen=True)
class CourseMetrics:
    """Derived figures for one course."""
    completed_weighted: float
    grade_so_far: t.Optional[float]
    current_mark: float
    total_weights: float

    @property
    def weights_balanced(self) -> bool:
        """True when the normalized weights sum to 100% (within tolerance)."""
        return abs(self.total_weights - 100) <= WEIGHT_SUM_TOLERANCE

    @property
    def is_complete(self) -> bool:
        return self.completed_weighted >= 100


def grade_value(assignment: Assignment) -> t.Optional[float]:
    """The assignment's grade as a float, or None if it has no usable grade."""
    grade = assignment.grade
    if grade is None or isinstance(grade, bool) or not isinstance(grade, numbers.Real):
        return None
    grade = float(grade)
    if not math.isfinite(grade):
        return None
    return grade


def compute_metrics(course: Course) -> CourseMetrics:
    total_weights = 0.0
    completed_weighted = 0.0
    current_mark = 0.0
    completed_earned = 0.0

    for assignment in course.assignments:
        weight = normalize_weight(assignment.weight)
        grade = grade_value(assignment)

        total_weights += weight
        current_mark += weight * (grade or 0.0) / 100

        if assignment.status == COMPLETED:
            completed_weighted += weight
            if grade is not None:
                completed_earned += weight * grade / 100

    grade_so_far = None
    if completed_weighted > 0:
        grade_so_far = completed_earned / completed_weighted * 100

    return CourseMetrics(
        completed_weighted=completed_weighted,
        grade_so_far=grade_so_far,
        current_mark=current_mark,
        total_weights=total_weights,
    )


def all_courses_complete(courses: t.Iterable[Course]) -> bool:
    """True when there is at least one course and every course is fully completed."""
    courses = list(courses)
    return bool(courses) and all(compute_metrics(c).is_complete for c in courses)


def format_percent(value: t.Optional[float]) -> str:
    """Render a metric with one decimal, or a dash when it has no value yet."""
    if value is None:
        return "—"
    return f"{value:.1f}%"
