# -*- coding: utf-8 -*-
"""Tests for the MCP server helpers."""
import pytest

from course_tracker import server
from course_tracker.store import CourseStore


@pytest.fixture
def store():
    s = CourseStore()
    server.set_store(s)
    yield s
    server.set_store(None)


def test_format_courses_without_courses(store: CourseStore):
    assert server.format_courses() == "📚 No courses found."


def test_format_courses_lists_metrics_and_assignments(store: CourseStore):
    course = store.add_course("Statistics")
    store.add_assignment(course.id, {"title": "", "weight": 0.5, "grade": 90, "status": "completed"})
    store.add_assignment(course.id, {"title": "Final", "weight": 30, "due_date": "2099-06-01"})

    text = server.format_courses()
    assert "Statistics" in text
    assert "Completed: 50.0%" in text
    assert "Grade So Far: 90.0%" in text
    assert "Current Mark: 45.0%" in text
    assert "Weights sum to 80.0%" in text
    assert text.index("Final") < text.index("Untitled")
    assert "Total: 1 course(s)" in text


def test_format_courses_for_course_without_assignments(store: CourseStore):
    store.add_course("Empty")
    assert "No assignments yet." in server.format_courses()
