# -*- coding: utf-8 -*-
"""Tests for course metrics."""
import math

import pytest

from course_tracker.metrics import all_courses_complete, compute_metrics, format_percent
from course_tracker.models import Assignment, Course
from course_tracker.weights import normalize_weight


def make_course(*assignments: Assignment) -> Course:
    return Course(id="c1", name="Course", assignments=tuple(assignments))


def test_mixed_fraction_and_percent_course():
    """Completed-but-ungraded work counts as weight consumed in grade so far."""
    course = make_course(
        Assignment(id="A", weight=25, grade=80, status="completed"),
        Assignment(id="B", weight=0.25, grade=None, status="completed"),
        Assignment(id="C", weight=50, grade=None, status="not_started"),
    )
    m = compute_metrics(course)
    assert m.total_weights == pytest.approx(100)
    assert m.completed_weighted == pytest.approx(50)
    assert m.current_mark == pytest.approx(20)
    assert m.grade_so_far == pytest.approx(40)
    assert m.weights_balanced


def test_grade_so_far_is_none_without_completed_weight():
    course = make_course(
        Assignment(id="A", weight=40, grade=90, status="in_progress"),
        Assignment(id="B", weight=0, grade=100, status="completed"),
    )
    m = compute_metrics(course)
    assert m.completed_weighted == 0
    assert m.grade_so_far is None
    assert m.current_mark == pytest.approx(36)


def test_empty_course():
    m = compute_metrics(make_course())
    assert m.total_weights == 0
    assert m.completed_weighted == 0
    assert m.current_mark == 0
    assert m.grade_so_far is None
    assert not m.weights_balanced


def test_current_mark_counts_grades_of_unfinished_work():
    course = make_course(Assignment(id="A", weight=0.5, grade=70, status="in_progress"))
    assert compute_metrics(course).current_mark == pytest.approx(35)


def test_completed_weighted_is_sum_of_completed_normalized_weights():
    assignments = [
        Assignment(id="A", weight=0.1, status="completed"),
        Assignment(id="B", weight=30, status="overdue"),
        Assignment(id="C", weight=1, status="completed"),
        Assignment(id="D", weight=15, status="in_progress"),
    ]
    m = compute_metrics(make_course(*assignments))
    expected = sum(normalize_weight(a.weight) for a in assignments if a.status == "completed")
    assert m.completed_weighted == pytest.approx(expected)
    assert m.total_weights == pytest.approx(155)
    assert not m.weights_balanced


def test_current_mark_never_exceeds_total_weights():
    course = make_course(
        Assignment(id="A", weight=30, grade=100, status="completed"),
        Assignment(id="B", weight=0.2, grade=55, status="completed"),
        Assignment(id="C", weight=90, grade=0, status="overdue"),
        Assignment(id="D", weight=5, grade=None),
    )
    m = compute_metrics(course)
    assert m.current_mark <= m.total_weights


def test_malformed_values_do_not_crash():
    """Bad weights count as zero and unusable grades as ungraded."""
    course = make_course(
        Assignment(id="A", weight=math.nan, grade=90, status="completed"),
        Assignment(id="B", weight=20, grade=math.inf, status="completed"),
        Assignment(id="C", weight=20, grade="A+", status="completed"),
        Assignment(id="D", weight=10, grade=150, status="completed"),
    )
    m = compute_metrics(course)
    assert m.total_weights == pytest.approx(50)
    assert m.completed_weighted == pytest.approx(50)
    assert m.current_mark == pytest.approx(15)
    assert m.grade_so_far == pytest.approx(30)


def test_all_courses_complete():
    done = Course(id="c1", name="Done", assignments=(
        Assignment(id="A", weight=1, status="completed"),
    ))
    half = Course(id="c2", name="Half", assignments=(
        Assignment(id="B", weight=50, status="completed"),
        Assignment(id="C", weight=50, status="in_progress"),
    ))
    assert all_courses_complete([done])
    assert not all_courses_complete([done, half])
    assert not all_courses_complete([])


def test_format_percent():
    assert format_percent(None) == "—"
    assert format_percent(40) == "40.0%"
    assert format_percent(33.333) == "33.3%"
