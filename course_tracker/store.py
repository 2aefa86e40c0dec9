# -*- coding: utf-8 -*-
"""
The course store: the single owner and only writer of tracker state.

State is an immutable tuple of ``Course`` values. Every mutation builds a
complete new tuple and swaps it in under the writer lock, so a reader always
sees either the old state or the new one. After each change the full
snapshot is handed to the backend on a background writer thread; a failed
save is logged and never undoes the change in memory.

Mutations that reference an unknown course or assignment id do nothing and
return None (or False). Only structural problems raise: unknown patch
fields, a value of the wrong type, an invalid status or due date, and
malformed imports. Anything the store commits can be loaded back.
"""
from __future__ import annotations

import logging
import threading
import typing as t
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from datetime import date, datetime

from course_tracker import due, metrics, status
from course_tracker.errors import InvalidFieldError, SnapshotError
from course_tracker.models import (
    ASSIGNMENT_FIELDS,
    ASSIGNMENT_STATUSES,
    Assignment,
    Course,
)
from course_tracker.persistence import SnapshotBackend
from course_tracker.snapshot import dump_snapshot, parse_snapshot

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def _is_number(value: t.Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_name(name: t.Any) -> None:
    if not isinstance(name, str):
        raise InvalidFieldError(
            f"Course name must be text, got {type(name).__name__}",
            details={"field": "name"},
        )


def _validate_fields(fields: t.Mapping[str, t.Any]) -> dict[str, t.Any]:
    """Check an assignment field mapping and normalize its due date.

    Only types are checked here; out-of-range or non-finite numbers are kept
    as given and degrade in the computations instead.
    """
    unknown = sorted(set(fields) - set(ASSIGNMENT_FIELDS))
    if unknown:
        raise InvalidFieldError(
            f"Unknown assignment field(s): {', '.join(unknown)}",
            details={"fields": unknown},
        )

    cleaned = dict(fields)
    if "title" in cleaned and not isinstance(cleaned["title"], str):
        raise InvalidFieldError(
            f"Title must be text, got {type(cleaned['title']).__name__}",
            details={"field": "title"},
        )
    if "weight" in cleaned and not _is_number(cleaned["weight"]):
        raise InvalidFieldError(
            f"Weight must be a number, got {cleaned['weight']!r}",
            details={"field": "weight"},
        )
    if cleaned.get("grade") is not None and not _is_number(cleaned["grade"]):
        raise InvalidFieldError(
            f"Grade must be a number or None, got {cleaned['grade']!r}",
            details={"field": "grade"},
        )

    if "status" in cleaned and cleaned["status"] not in ASSIGNMENT_STATUSES:
        raise InvalidFieldError(
            f"Invalid status: {cleaned['status']!r}",
            details={"field": "status", "allowed": list(ASSIGNMENT_STATUSES)},
        )

    if "due_date" in cleaned:
        value = cleaned["due_date"]
        if isinstance(value, datetime):
            value = value.date()
        if isinstance(value, date):
            value = value.isoformat()
        if value is not None and status.parse_due_date(value) is None:
            raise InvalidFieldError(
                f"Invalid due date: {value!r} (expected YYYY-MM-DD)",
                details={"field": "due_date"},
            )
        cleaned["due_date"] = value

    return cleaned


class CourseStore:
    """Owns the ordered collection of courses and applies every change to it.

    :param backend: Where snapshots are loaded from and saved to. Without a
        backend the store lives in memory only.
    :param clock: Returns the current moment; used for overdue derivation.
    """

    def __init__(
            self,
            backend: t.Optional[SnapshotBackend] = None,
            clock: t.Callable[[], datetime] = datetime.now,
    ) -> None:
        self._backend = backend
        self._clock = clock
        self._lock = threading.RLock()
        self._writer: t.Optional[ThreadPoolExecutor] = None
        self._last_save: t.Optional[Future] = None
        self.last_save_error: t.Optional[BaseException] = None
        self._courses: tuple[Course, ...] = self._load_initial()

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    @property
    def courses(self) -> tuple[Course, ...]:
        """The current state. Immutable, so safe to hold on to."""
        return self._courses

    def get_course(self, course_id: str) -> t.Optional[Course]:
        for course in self._courses:
            if course.id == course_id:
                return course
        return None

    def find_assignment(self, course_id: str, assignment_id: str) -> t.Optional[Assignment]:
        course = self.get_course(course_id)
        if course is None:
            return None
        return course.find_assignment(assignment_id)

    def export_snapshot(self) -> dict[str, t.Any]:
        return dump_snapshot(self._courses)

    def course_metrics(
            self, course_id: str, now: t.Optional[datetime] = None
    ) -> t.Optional[metrics.CourseMetrics]:
        """Reconcile overdue statuses, then compute the course's metrics."""
        self.reconcile_overdue(now)
        course = self.get_course(course_id)
        if course is None:
            return None
        return metrics.compute_metrics(course)

    def next_due(self, course_id: str, now: t.Optional[datetime] = None) -> t.Optional[Assignment]:
        course = self.get_course(course_id)
        if course is None:
            return None
        return due.next_due(course.assignments, now or self._clock())

    # ------------------------------------------------------------------
    # Course operations
    # ------------------------------------------------------------------

    def add_course(self, name: str) -> Course:
        _check_name(name)
        course = Course(id=new_id(), name=name)
        with self._lock:
            self._commit(self._courses + (course,))
        logger.debug("Added course %s (%r)", course.id, name)
        return course

    def rename_course(self, course_id: str, name: str) -> t.Optional[Course]:
        _check_name(name)
        with self._lock:
            course = self.get_course(course_id)
            if course is None:
                logger.debug("rename_course: unknown course %s", course_id)
                return None
            renamed = replace(course, name=name)
            self._commit(tuple(renamed if c.id == course_id else c for c in self._courses))
        return renamed

    def remove_course(self, course_id: str) -> bool:
        """Remove a course together with every assignment it owns."""
        with self._lock:
            if self.get_course(course_id) is None:
                logger.debug("remove_course: unknown course %s", course_id)
                return False
            self._commit(tuple(c for c in self._courses if c.id != course_id))
        logger.debug("Removed course %s", course_id)
        return True

    # ------------------------------------------------------------------
    # Assignment operations
    # ------------------------------------------------------------------

    def add_assignment(
            self, course_id: str, fields: t.Optional[t.Mapping[str, t.Any]] = None
    ) -> t.Optional[Assignment]:
        """Append a new assignment to a course.

        :param course_id: The owning course.
        :param fields: Any of title, due_date, weight, status and grade.
        :return: The created assignment, or None if the course does not exist.
        :raises InvalidFieldError: On unknown fields, status or due date.
        """
        cleaned = _validate_fields(fields or {})
        with self._lock:
            course = self.get_course(course_id)
            if course is None:
                logger.debug("add_assignment: unknown course %s", course_id)
                return None
            assignment = status.reconcile(Assignment(id=new_id(), **cleaned), self._clock())
            updated = replace(course, assignments=course.assignments + (assignment,))
            self._commit(self._replace_course(updated))
        logger.debug("Added assignment %s to course %s", assignment.id, course_id)
        return assignment

    def update_assignment(
            self, course_id: str, assignment_id: str, patch: t.Mapping[str, t.Any]
    ) -> t.Optional[Assignment]:
        """Merge ``patch`` into an assignment, leaving other fields untouched.

        :return: The updated assignment, or None if either id is unknown.
        :raises InvalidFieldError: On unknown fields, status or due date.
        """
        cleaned = _validate_fields(patch)
        with self._lock:
            course = self.get_course(course_id)
            current = course.find_assignment(assignment_id) if course else None
            if current is None:
                logger.debug("update_assignment: unknown assignment %s/%s", course_id, assignment_id)
                return None
            merged = status.reconcile(replace(current, **cleaned), self._clock())
            updated = replace(course, assignments=tuple(
                merged if a.id == assignment_id else a for a in course.assignments
            ))
            self._commit(self._replace_course(updated))
        return merged

    def remove_assignment(self, course_id: str, assignment_id: str) -> bool:
        with self._lock:
            course = self.get_course(course_id)
            if course is None or course.find_assignment(assignment_id) is None:
                logger.debug("remove_assignment: unknown assignment %s/%s", course_id, assignment_id)
                return False
            updated = replace(course, assignments=tuple(
                a for a in course.assignments if a.id != assignment_id
            ))
            self._commit(self._replace_course(updated))
        return True

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def reconcile_overdue(self, now: t.Optional[datetime] = None) -> int:
        """Mark every past-due, unfinished assignment as overdue.

        :return: How many assignments changed. Nothing is saved when zero.
        """
        now = now or self._clock()
        with self._lock:
            changed = 0
            courses = []
            for course in self._courses:
                assignments = tuple(status.reconcile(a, now) for a in course.assignments)
                changed += sum(1 for old, new in zip(course.assignments, assignments) if old is not new)
                courses.append(replace(course, assignments=assignments))
            if changed:
                self._commit(tuple(courses))
                logger.info("Marked %d assignment(s) overdue", changed)
        return changed

    def import_snapshot(self, payload: t.Any) -> tuple[Course, ...]:
        """Replace the whole state with an imported snapshot.

        The payload is validated in full first; a malformed one raises
        ``SnapshotError`` and leaves the current state untouched.
        """
        courses = parse_snapshot(payload)
        with self._lock:
            self._commit(courses)
        logger.info("Imported %d course(s)", len(courses))
        return courses

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def flush(self, timeout: t.Optional[float] = None) -> None:
        """Block until every snapshot handed to the backend so far is written."""
        pending = self._last_save
        if pending is not None:
            pending.result(timeout=timeout)

    def close(self) -> None:
        self.flush()
        if self._writer is not None:
            self._writer.shutdown(wait=True)
            self._writer = None

    def _load_initial(self) -> tuple[Course, ...]:
        if self._backend is None:
            return ()
        try:
            payload = self._backend.load()
        except (OSError, ValueError):
            logger.exception("Could not read stored snapshot; starting empty")
            return ()
        if payload is None:
            return ()
        try:
            return parse_snapshot(payload)
        except SnapshotError as e:
            logger.error("Ignoring stored snapshot: %s", e.message)
            return ()

    def _replace_course(self, updated: Course) -> tuple[Course, ...]:
        return tuple(updated if c.id == updated.id else c for c in self._courses)

    def _commit(self, courses: tuple[Course, ...]) -> None:
        # Caller holds self._lock.
        self._courses = courses
        if self._backend is None:
            return
        if self._writer is None:
            self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="course-store-writer")
        self._last_save = self._writer.submit(self._save, courses)

    def _save(self, courses: tuple[Course, ...]) -> None:
        try:
            self._backend.save(dump_snapshot(courses))
        except Exception as e:
            self.last_save_error = e
            logger.error("Failed to save snapshot: %s", e, exc_info=True)
        else:
            self.last_save_error = None
