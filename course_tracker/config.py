"""
Configuration for the course tracker.

Values come from environment variables with sensible defaults so the CLI,
the MCP server and the REST service all read the same snapshot file.
"""
from __future__ import annotations

import logging
import os
import typing as t
from pathlib import Path

from rich.logging import RichHandler

# Storage key of the original browser build, kept as the default file name.
SNAPSHOT_NAME = "course-tracker-v1"

DEFAULT_DATA_FILE = Path.home() / ".course_tracker" / f"{SNAPSHOT_NAME}.json"
DEFAULT_EXPORT_FILE = "courses_export.json"

DATA_FILE = Path(os.getenv("COURSE_TRACKER_DATA_FILE", str(DEFAULT_DATA_FILE))).expanduser()
SERVICE_PORT = int(os.getenv("COURSE_TRACKER_SERVICE_PORT", "8004"))
LOG_LEVEL = os.getenv("COURSE_TRACKER_LOG_LEVEL", "WARNING")


def configure_logging(level: t.Optional[str] = None) -> None:
    """Route the package loggers through rich.

    :param level: Logging level name. Defaults to ``COURSE_TRACKER_LOG_LEVEL``.
    """
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
