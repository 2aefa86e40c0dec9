# -*- coding: utf-8 -*-
"""
Snapshot backends for the course store.

A backend only has to load the last saved snapshot and save a new one. The
store decides when to call them and what to do when they fail.
"""
from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import typing as t
from pathlib import Path

logger = logging.getLogger(__name__)


class SnapshotBackend(t.Protocol):
    """Load/save contract used by ``CourseStore``."""

    def load(self) -> t.Optional[dict[str, t.Any]]:
        """Return the last saved snapshot, or None if nothing was saved yet."""
        ...

    def save(self, snapshot: dict[str, t.Any]) -> None:
        """Persist a complete snapshot, replacing the previous one."""
        ...


class MemoryBackend:
    """Keeps the last snapshot in process memory."""

    def __init__(self, snapshot: t.Optional[dict[str, t.Any]] = None) -> None:
        self.snapshot = copy.deepcopy(snapshot)
        self.saves = 0

    def load(self) -> t.Optional[dict[str, t.Any]]:
        return copy.deepcopy(self.snapshot)

    def save(self, snapshot: dict[str, t.Any]) -> None:
        self.snapshot = copy.deepcopy(snapshot)
        self.saves += 1


class JsonFileBackend:
    """Stores the snapshot as a JSON file.

    Writes go to a temporary file in the same directory that then replaces
    the target, so a crash mid-write leaves the previous snapshot intact.
    """

    def __init__(self, path: t.Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> t.Optional[dict[str, t.Any]]:
        if not self.path.is_file():
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save(self, snapshot: dict[str, t.Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved snapshot to %s", self.path)
