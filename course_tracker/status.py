# -*- coding: utf-8 -*-
"""
Overdue derivation.

The only automatic status change in the tracker: an assignment that is not
completed becomes overdue once the last second of its due day has passed.
Every other transition is an explicit edit made through the store.
"""
from __future__ import annotations

import re
import typing as t
from dataclasses import replace
from datetime import date, datetime, time

from course_tracker.models import COMPLETED, OVERDUE, Assignment, AssignmentStatus

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

END_OF_DAY = time(23, 59, 59)


def parse_due_date(value: t.Optional[str]) -> t.Optional[date]:
    """Parse a ``YYYY-MM-DD`` string, returning None when absent or malformed."""
    if not value or not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def is_past(due_date: t.Optional[str], now: t.Optional[datetime] = None) -> bool:
    """Check whether the end of the due day (23:59:59 local) is before ``now``.

    :param due_date: ISO calendar date, or None for "no deadline".
    :param now: The moment to compare against. Defaults to the local wall clock.
    :return: False when there is no (readable) due date.
    """
    day = parse_due_date(due_date)
    if day is None:
        return False
    if now is None:
        now = datetime.now()
    deadline = datetime.combine(day, END_OF_DAY)
    if now.tzinfo is not None:
        deadline = deadline.replace(tzinfo=now.tzinfo)
    return deadline < now


def derive_status(assignment: Assignment, now: t.Optional[datetime] = None) -> AssignmentStatus:
    """Return the status the assignment should have at ``now``."""
    if assignment.status in (COMPLETED, OVERDUE):
        return assignment.status
    if is_past(assignment.due_date, now):
        return OVERDUE
    return assignment.status


def reconcile(assignment: Assignment, now: t.Optional[datetime] = None) -> Assignment:
    """Apply the overdue rule, returning the same object when nothing changes."""
    status = derive_status(assignment, now)
    if status == assignment.status:
        return assignment
    return replace(assignment, status=status)
