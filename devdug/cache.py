"""Persisted snapshot of discovered projects.

The snapshot is a single JSON file. Its age is the file's own mtime, and a
snapshot older than the validity window is treated exactly like a missing
one. A file that fails validation in any part is rejected whole.
"""

import logging
import os
import tempfile
import time
from datetime import timedelta
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .models import CacheSnapshot, ProjectRecord

log = logging.getLogger(__name__)

CACHE_FILENAME = "projects.json"
DEFAULT_VALIDITY = timedelta(hours=24)


class CacheStore:
    """Reads and writes the project snapshot under a storage root.

    Usage:
        store = CacheStore(Path("~/.config/devdug").expanduser())
        projects = store.load()  # None on miss
    """

    def __init__(self, root: str | Path, validity: timedelta = DEFAULT_VALIDITY):
        self.root = Path(root)
        self.validity = validity

    @property
    def path(self) -> Path:
        return self.root / CACHE_FILENAME

    def age(self) -> Optional[timedelta]:
        """Time since the snapshot was last written, or None if there is none."""
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return None
        return timedelta(seconds=max(0.0, time.time() - mtime))

    def is_fresh(self) -> bool:
        age = self.age()
        return age is not None and age < self.validity

    def load(self) -> Optional[list[ProjectRecord]]:
        """Return cached projects if a fresh, valid snapshot exists; otherwise None."""
        age = self.age()
        if age is None:
            log.debug("No cache at %s", self.path)
            return None
        if age >= self.validity:
            log.info("Cache is stale (%.1fh old)", age.total_seconds() / 3600)
            return None

        try:
            raw = self.path.read_bytes()
            snapshot = CacheSnapshot.model_validate_json(raw)
        except (OSError, ValidationError, ValueError) as e:
            log.warning("Ignoring unreadable cache %s: %s", self.path, e)
            return None

        log.info("Loaded %d cached projects (%.0fs old)", len(snapshot.projects), age.total_seconds())
        return snapshot.projects

    def save(self, projects: list[ProjectRecord]) -> None:
        """Write the snapshot atomically: readers see either the old file or the new one."""
        payload = CacheSnapshot(projects=list(projects)).model_dump_json(indent=2)
        self.root.mkdir(parents=True, exist_ok=True)

        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=".projects-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self.path)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
        log.debug("Wrote %d projects to %s", len(projects), self.path)

    def clear(self) -> bool:
        """Delete the snapshot. Returns True if a file was removed."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        log.info("Cleared cache %s", self.path)
        return True
