"""
Exceptions raised by the course tracker.

Only structural problems raise. Unknown ids on mutations are no-ops and bad
numeric input degrades to a neutral value, so neither appears here.
"""
from __future__ import annotations

import typing as t


class TrackerError(Exception):
    """Base exception for all course tracker errors."""

    def __init__(self, message: str, details: t.Optional[dict[str, t.Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SnapshotError(TrackerError):
    """Raised when an imported or stored snapshot has the wrong shape."""


class InvalidFieldError(TrackerError):
    """Raised when a patch names an unknown field, or carries a wrongly typed value, an invalid status or due date."""
