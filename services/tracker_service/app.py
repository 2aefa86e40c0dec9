"""
FastAPI service for course tracker operations.

This service exposes the course store as REST API endpoints. Every write goes
through ``CourseStore``; metrics and the next due assignment are computed on
request from the current state.
"""
from __future__ import annotations

import logging
import typing as t
from contextlib import asynccontextmanager

from fastapi import Body, Depends, FastAPI, HTTPException, Request

from course_tracker import config
from course_tracker.errors import InvalidFieldError, SnapshotError
from course_tracker.persistence import JsonFileBackend
from course_tracker.snapshot import assignment_to_dict, count_assignments, course_to_dict
from course_tracker.store import CourseStore
from services.shared.models import (
    Assignment as PydanticAssignment,
    AssignmentFields,
    AssignmentPatch,
    Course as PydanticCourse,
    CreateCourseRequest,
    ImportResponse,
    MetricsResponse,
    NextDueResponse,
    ReconcileResponse,
    RenameCourseRequest,
)

logger = logging.getLogger(__name__)


def create_app(store: t.Optional[CourseStore] = None) -> FastAPI:
    """Build the REST app around a store.

    :param store: The store to serve. Defaults to one backed by the
        configured data file, opened on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the store on startup and flush pending writes on shutdown."""
        owned = store is None
        app.state.store = store or CourseStore(JsonFileBackend(config.DATA_FILE))
        yield
        if owned:
            app.state.store.close()
        else:
            app.state.store.flush()

    app = FastAPI(
        title="Course Tracker Service",
        description="REST API for courses, assignments and grade metrics",
        version="1.0.0",
        lifespan=lifespan,
    )
    if store is not None:
        app.state.store = store
    _register_routes(app)
    return app


def get_store(request: Request) -> CourseStore:
    return request.app.state.store


def _course_response(course) -> PydanticCourse:
    return PydanticCourse.model_validate(course_to_dict(course))


def _assignment_response(assignment) -> PydanticAssignment:
    return PydanticAssignment.model_validate(assignment_to_dict(assignment))


def _register_routes(app: FastAPI) -> None:

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container orchestration."""
        return {"status": "healthy", "service": "course-tracker-service"}

    @app.get("/courses", response_model=list[PydanticCourse])
    def list_courses(store: CourseStore = Depends(get_store)) -> list[PydanticCourse]:
        """List every course with its assignments in stored order."""
        return [_course_response(c) for c in store.courses]

    @app.post("/courses", response_model=PydanticCourse, status_code=201)
    def add_course(request: CreateCourseRequest, store: CourseStore = Depends(get_store)) -> PydanticCourse:
        """Create a course with no assignments."""
        return _course_response(store.add_course(request.name))


    @app.patch("/courses/{course_id}", response_model=PydanticCourse)
    def rename_course(
            course_id: str, request: RenameCourseRequest, store: CourseStore = Depends(get_store)
    ) -> PydanticCourse:
        """Rename a course."""
        course = store.rename_course(course_id, request.name)
        if course is None:
            raise HTTPException(status_code=404, detail=f"Course not found: {course_id}")
        return _course_response(course)

    @app.delete("/courses/{course_id}", status_code=204)
    def remove_course(course_id: str, store: CourseStore = Depends(get_store)) -> None:
        """Delete a course and all of its assignments."""
        if not store.remove_course(course_id):
            raise HTTPException(status_code=404, detail=f"Course not found: {course_id}")

    @app.post("/courses/{course_id}/assignments", response_model=PydanticAssignment, status_code=201)
    def add_assignment(
            course_id: str, request: AssignmentFields, store: CourseStore = Depends(get_store)
    ) -> PydanticAssignment:
        """Add an assignment to a course."""
        try:
            assignment = store.add_assignment(course_id, request.model_dump())
        except InvalidFieldError as e:
            raise HTTPException(status_code=422, detail=e.message)
        if assignment is None:
            raise HTTPException(status_code=404, detail=f"Course not found: {course_id}")
        return _assignment_response(assignment)

    @app.patch("/courses/{course_id}/assignments/{assignment_id}", response_model=PydanticAssignment)
    def update_assignment(
            course_id: str,
            assignment_id: str,
            request: AssignmentPatch,
            store: CourseStore = Depends(get_store),
    ) -> PydanticAssignment:
        """
        Update an assignment.

        Only the fields present in the body change; the rest keep their value.
        """
        try:
            assignment = store.update_assignment(
                course_id, assignment_id, request.model_dump(exclude_unset=True)
            )
        except InvalidFieldError as e:
            raise HTTPException(status_code=422, detail=e.message)
        if assignment is None:
            raise HTTPException(
                status_code=404, detail=f"Assignment not found: {course_id}/{assignment_id}"
            )
        return _assignment_response(assignment)

    @app.delete("/courses/{course_id}/assignments/{assignment_id}", status_code=204)
    def remove_assignment(course_id: str, assignment_id: str, store: CourseStore = Depends(get_store)) -> None:
        """Delete an assignment."""
        if not store.remove_assignment(course_id, assignment_id):
            raise HTTPException(
                status_code=404, detail=f"Assignment not found: {course_id}/{assignment_id}"
            )

    @app.get("/courses/{course_id}/metrics", response_model=MetricsResponse)
    def course_metrics(course_id: str, store: CourseStore = Depends(get_store)) -> MetricsResponse:
        """
        Compute the course's metrics.

        Overdue statuses are reconciled first, so the figures reflect the
        current date.
        """
        result = store.course_metrics(course_id)
        if result is None:
            raise HTTPException(status_code=404, detail=f"Course not found: {course_id}")
        return MetricsResponse(
            course_id=course_id,
            completed_weighted=result.completed_weighted,
            grade_so_far=result.grade_so_far,
            current_mark=result.current_mark,
            total_weights=result.total_weights,
            weights_balanced=result.weights_balanced,
        )

    @app.get("/courses/{course_id}/next-due", response_model=NextDueResponse)
    def next_due(course_id: str, store: CourseStore = Depends(get_store)) -> NextDueResponse:
        """Return the earliest upcoming, unfinished assignment, if any."""
        if store.get_course(course_id) is None:
            raise HTTPException(status_code=404, detail=f"Course not found: {course_id}")
        assignment = store.next_due(course_id)
        return NextDueResponse(assignment=_assignment_response(assignment) if assignment else None)

    @app.post("/reconcile", response_model=ReconcileResponse)
    def reconcile(store: CourseStore = Depends(get_store)) -> ReconcileResponse:
        """Mark every unfinished, past-due assignment as overdue."""
        return ReconcileResponse(transitions=store.reconcile_overdue())

    @app.get("/export")
    def export_snapshot(store: CourseStore = Depends(get_store)) -> dict:
        """Export the whole state in the snapshot format."""
        return store.export_snapshot()

    @app.post("/import", response_model=ImportResponse)
    def import_snapshot(payload: t.Any = Body(...), store: CourseStore = Depends(get_store)) -> ImportResponse:
        """
        Replace the whole state with a snapshot.

        The payload is validated in full before anything changes; a malformed
        snapshot is rejected and the current state is kept.
        """
        try:
            courses = store.import_snapshot(payload)
        except SnapshotError as e:
            logger.warning("Rejected import: %s", e.message)
            raise HTTPException(status_code=422, detail={"message": e.message, **e.details})
        return ImportResponse(courses=len(courses), assignments=count_assignments(courses))


app = create_app()


if __name__ == "__main__":
    import uvicorn
    config.configure_logging()
    uvicorn.run(app, host="0.0.0.0", port=config.SERVICE_PORT)
