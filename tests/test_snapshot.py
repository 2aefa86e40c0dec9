# -*- coding: utf-8 -*-
"""Tests for snapshot parsing and serialization."""
import json

import pytest

from course_tracker.errors import SnapshotError
from course_tracker.models import Assignment, Course
from course_tracker.snapshot import count_assignments, dump_snapshot, parse_snapshot

SAMPLE = {
    "courses": [
        {
            "id": "c1",
            "name": "Physics",
            "assignments": [
                {"id": "a1", "title": "Lab 1", "dueDate": "2025-02-01", "weight": 0.25,
                 "status": "completed", "grade": 92.5},
                {"id": "a2", "title": "", "dueDate": None, "weight": 50,
                 "status": "not_started", "grade": None},
            ],
        },
        {"id": "c2", "name": "History", "assignments": []},
    ]
}


def test_parse_snapshot_builds_courses_in_order():
    courses = parse_snapshot(SAMPLE)
    assert [c.id for c in courses] == ["c1", "c2"]
    first = courses[0].assignments[0]
    assert first == Assignment(
        id="a1", title="Lab 1", due_date="2025-02-01", weight=0.25, status="completed", grade=92.5
    )
    assert courses[0].assignments[1].display_title == "Untitled"
    assert count_assignments(courses) == 2


def test_export_then_import_round_trip():
    """Exported JSON re-imports to identical, identically ordered courses."""
    courses = parse_snapshot(SAMPLE)
    exported = json.loads(json.dumps(dump_snapshot(courses)))
    assert exported == SAMPLE
    assert parse_snapshot(exported) == courses


def test_dump_uses_wire_field_names():
    course = Course(id="c1", name="Math", assignments=(Assignment(id="a1", due_date="2025-01-01"),))
    dumped = dump_snapshot([course])
    assert set(dumped) == {"courses"}
    assert set(dumped["courses"][0]) == {"id", "name", "assignments"}
    assert set(dumped["courses"][0]["assignments"][0]) == {
        "id", "title", "dueDate", "weight", "status", "grade"
    }


def test_extra_keys_are_ignored():
    payload = {"version": 2, "courses": [{"id": "c1", "name": "X", "assignments": [], "color": "red"}]}
    assert parse_snapshot(payload) == (Course(id="c1", name="X"),)


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "courses",
        [],
        {},
        {"courses": None},
        {"courses": {"c1": {}}},
    ],
)
def test_courses_must_be_an_array(payload):
    with pytest.raises(SnapshotError):
        parse_snapshot(payload)


@pytest.mark.parametrize(
    "assignment",
    [
        {"id": "a1", "weight": 10},
        {"id": "a1", "weight": "10", "status": "completed"},
        {"id": "a1", "weight": 10, "status": "finished"},
        {"id": "a1", "weight": 10, "status": "completed", "grade": "A"},
        {"id": "a1", "weight": 10, "status": "completed", "dueDate": "Feb 1"},
        {"weight": 10, "status": "completed"},
    ],
)
def test_malformed_assignment_rejects_whole_snapshot(assignment):
    payload = {"courses": [
        {"id": "ok", "name": "Fine", "assignments": []},
        {"id": "c1", "name": "X", "assignments": [assignment]},
    ]}
    with pytest.raises(SnapshotError) as exc_info:
        parse_snapshot(payload)
    assert exc_info.value.details["errors"]


def test_duplicate_ids_are_rejected():
    payload = {"courses": [
        {"id": "c1", "name": "A", "assignments": [
            {"id": "a1", "weight": 1, "status": "completed"}
        ]},
        {"id": "c2", "name": "B", "assignments": [
            {"id": "a1", "weight": 1, "status": "completed"}
        ]},
    ]}
    with pytest.raises(SnapshotError, match="Duplicate assignment id"):
        parse_snapshot(payload)

    payload = {"courses": [{"id": "c1", "name": "A"}, {"id": "c1", "name": "B"}]}
    with pytest.raises(SnapshotError, match="Duplicate course id"):
        parse_snapshot(payload)
