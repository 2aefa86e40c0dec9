"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the dataclass models in
``course_tracker.models``. They define the interchange format (the exported
snapshot file and the REST payloads), so field names here are the wire names:
``dueDate`` rather than ``due_date``.
"""
from __future__ import annotations

import typing as t

from pydantic import BaseModel, ConfigDict, Field, field_validator

AssignmentStatus = t.Literal["not_started", "in_progress", "completed", "overdue"]

ISO_DATE = r"^\d{4}-\d{2}-\d{2}$"


class Assignment(BaseModel):
    """
    A graded deliverable as it appears in a snapshot.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    title: str = ""
    due_date: t.Optional[str] = Field(default=None, alias="dueDate", pattern=ISO_DATE)
    weight: float = Field(strict=True)  # raw: fraction (0-1) or percent
    status: AssignmentStatus
    grade: t.Optional[float] = Field(default=None, strict=True)


class Course(BaseModel):
    """
    A course with its assignments in insertion order.
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    assignments: list[Assignment] = Field(default_factory=list)


class Snapshot(BaseModel):
    """
    The whole tracker state: the persisted file and the import/export format.
    """
    model_config = ConfigDict(extra="ignore")

    courses: list[Course]


# Request/Response Models for API endpoints
class CreateCourseRequest(BaseModel):
    """Request model for creating a course."""
    name: str


class RenameCourseRequest(BaseModel):
    """Request model for renaming a course."""
    name: str


class AssignmentFields(BaseModel):
    """Request model for creating an assignment."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    title: str = ""
    due_date: t.Optional[str] = Field(default=None, alias="dueDate", pattern=ISO_DATE)
    weight: float = 0
    status: AssignmentStatus = "not_started"
    grade: t.Optional[float] = None


class AssignmentPatch(BaseModel):
    """
    Request model for a partial assignment update.

    Only the fields present in the request body are applied; send ``null``
    explicitly to clear ``dueDate`` or ``grade``. The other fields may be
    left out but not set to ``null``.
    """
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    title: t.Optional[str] = None
    due_date: t.Optional[str] = Field(default=None, alias="dueDate", pattern=ISO_DATE)
    weight: t.Optional[float] = None
    status: t.Optional[AssignmentStatus] = None
    grade: t.Optional[float] = None

    @field_validator("title", "weight", "status")
    @classmethod
    def not_null(cls, v: t.Any) -> t.Any:
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class MetricsResponse(BaseModel):
    """Response model for a course's derived metrics."""
    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")
    completed_weighted: float = Field(alias="completedWeighted")
    grade_so_far: t.Optional[float] = Field(alias="gradeSoFar")
    current_mark: float = Field(alias="currentMark")
    total_weights: float = Field(alias="totalWeights")
    weights_balanced: bool = Field(alias="weightsBalanced")


class NextDueResponse(BaseModel):
    """Response model for the next actionable assignment of a course."""
    assignment: t.Optional[Assignment] = None


class ReconcileResponse(BaseModel):
    """Response model for an overdue reconciliation pass."""
    transitions: int


class ImportResponse(BaseModel):
    """Response model for a successful snapshot import."""
    courses: int
    assignments: int
