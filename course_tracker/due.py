# -*- coding: utf-8 -*-
import typing as t
from datetime import datetime

from course_tracker.models import COMPLETED, Assignment
from course_tracker.status import is_past

# Undated assignments sort after every real date in the course view.
NO_DUE_DATE_SORT_KEY = "9999-12-31"


def next_due(
        assignments: t.Iterable[Assignment],
        now: t.Optional[datetime] = None
) -> t.Optional[Assignment]:
    """Picks the next actionable assignment.

    Only assignments with a due date that are not completed and not yet past
    are considered. ISO dates compare correctly as strings, so the earliest
    one wins; ties keep their original order.

    :param assignments: The assignments of a course. Not modified.
    :param now: The moment to compare due dates against (defaults to now).
    :return: The upcoming assignment, or None if nothing is upcoming.
    """
    upcoming = [
        a for a in assignments
        if a.due_date and a.status != COMPLETED and not is_past(a.due_date, now)
    ]
    if not upcoming:
        return None
    return min(upcoming, key=lambda a: a.due_date)


def display_order(assignments: t.Iterable[Assignment]) -> list[Assignment]:
    """Returns a new list ordered by due date with undated assignments last."""
    return sorted(assignments, key=lambda a: a.due_date or NO_DUE_DATE_SORT_KEY)
