# -*- coding: utf-8 -*-
"""Tests for overdue derivation."""
from datetime import datetime, timezone

from course_tracker.models import Assignment
from course_tracker.status import derive_status, is_past, parse_due_date, reconcile

NOW = datetime(2025, 1, 15, 12, 0, 0)


def test_no_due_date_is_never_past():
    assert is_past(None, NOW) is False
    assert is_past("", NOW) is False


def test_due_day_counts_until_its_last_second():
    """A deadline is only past once 23:59:59 of that day has gone by."""
    assert is_past("2025-01-15", NOW) is False
    assert is_past("2025-01-15", datetime(2025, 1, 15, 23, 59, 59)) is False
    assert is_past("2025-01-15", datetime(2025, 1, 16, 0, 0, 0)) is True
    assert is_past("2025-01-14", NOW) is True
    assert is_past("2025-02-01", NOW) is False


def test_malformed_due_date_is_not_past():
    assert is_past("not a date", NOW) is False
    assert is_past("2025-13-40", NOW) is False
    assert parse_due_date("20250115") is None


def test_aware_now_is_supported():
    aware = datetime(2025, 1, 16, 0, 0, 1, tzinfo=timezone.utc)
    assert is_past("2025-01-15", aware) is True


def test_unfinished_past_assignment_becomes_overdue():
    a = Assignment(id="a1", due_date="2025-01-01", status="in_progress")
    assert derive_status(a, NOW) == "overdue"
    reconciled = reconcile(a, NOW)
    assert reconciled.status == "overdue"
    assert a.status == "in_progress"


def test_not_started_past_assignment_becomes_overdue():
    a = Assignment(id="a1", due_date="2024-12-31", status="not_started")
    assert reconcile(a, NOW).status == "overdue"


def test_completed_assignment_never_becomes_overdue():
    a = Assignment(id="a1", due_date="2020-01-01", status="completed")
    assert derive_status(a, NOW) == "completed"
    assert reconcile(a, NOW) is a


def test_future_assignment_keeps_its_status():
    a = Assignment(id="a1", due_date="2025-02-01", status="in_progress")
    assert reconcile(a, NOW) is a


def test_reconcile_returns_same_object_when_already_overdue():
    a = Assignment(id="a1", due_date="2025-01-01", status="overdue")
    assert reconcile(a, NOW) is a
