"""Discovery orchestration: cache check → conventional locations → home sweep → persist.

Two-phase delivery:
  1. FAST: projects under conventional IDE/tool roots (or the cached set)
  2. COMPLETE: merged with the home directory sweep, deduplicated and sorted

A cache hit serves the cached set for both phases and refreshes the cache
in a background thread for the next run.
"""

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from .builder import build_project
from .cache import CacheStore
from .config import DevdugConfig
from .locations import conventional_candidates, home_candidates, resolve_home
from .models import ProjectRecord

log = logging.getLogger(__name__)

ProjectsCallback = Callable[[list[ProjectRecord]], None]


class Phase(str, Enum):
    FAST = "fast"
    COMPLETE = "complete"


@dataclass(frozen=True)
class DiscoveryPhase:
    phase: Phase
    projects: list[ProjectRecord]
    from_cache: bool = False
    cancelled: bool = False


def merge_projects(*groups: Iterable[ProjectRecord]) -> list[ProjectRecord]:
    """Concatenate groups, keeping the first record seen for each path."""
    merged: dict[str, ProjectRecord] = {}
    for group in groups:
        for project in group:
            merged.setdefault(project.path, project)
    return list(merged.values())


def sort_projects(projects: Iterable[ProjectRecord]) -> list[ProjectRecord]:
    """Order by name, case-insensitively, with path as tie-breaker."""
    return sorted(projects, key=lambda p: (p.name.casefold(), p.path))


def _is_set(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()


class DiscoveryEngine:
    """Finds projects, serving from and maintaining a CacheStore.

    Usage:
        engine = DiscoveryEngine(DevdugConfig.from_env())
        projects = engine.discover(on_fast=show_partial, on_complete=show_all)
        engine.close()
    """

    def __init__(self, config: DevdugConfig, cache: Optional[CacheStore] = None):
        self.config = config
        self.cache = cache if cache is not None else CacheStore(config.cache_dir, config.cache_validity)
        self._scan_lock = threading.RLock()
        self._refresh_thread: Optional[threading.Thread] = None
        self._refresh_cancel = threading.Event()

    # ---- Public API ----

    def discover(
        self,
        on_fast: Optional[ProjectsCallback] = None,
        on_complete: Optional[ProjectsCallback] = None,
        on_refresh: Optional[ProjectsCallback] = None,
        cancel: Optional[threading.Event] = None,
        force_refresh: bool = False,
    ) -> list[ProjectRecord]:
        """
        Run discovery and return the complete project list.

        Args:
            on_fast: Called with the fast subset (conventional roots, or the cached set).
            on_complete: Called with the final merged set.
            on_refresh: Called from the background thread with the refreshed set
                after a cache hit, once it has been persisted.
            cancel: Set to stop visiting further directories; records found so far
                are returned and the cache is left untouched.
            force_refresh: Skip the cache and always scan.

        Raises:
            HomeDirectoryError: if the home directory cannot be resolved.
        """
        projects: list[ProjectRecord] = []
        for step in self.phases(cancel=cancel, force_refresh=force_refresh, on_refresh=on_refresh):
            if step.phase == Phase.FAST:
                if on_fast:
                    on_fast(step.projects)
            else:
                projects = step.projects
                if on_complete:
                    on_complete(step.projects)
        return projects

    def phases(
        self,
        cancel: Optional[threading.Event] = None,
        force_refresh: bool = False,
        on_refresh: Optional[ProjectsCallback] = None,
    ) -> Iterator[DiscoveryPhase]:
        """
        Yield the FAST then the COMPLETE result of one discovery run.

        A cold run holds the engine's scan lock across both yields. The lock is
        reentrant, so a consumer may start another scan on this engine from the
        same thread between phases. Cold runs on other threads wait for it and a
        background refresh is skipped.
        """
        home = resolve_home(self.config.home)

        cached = None if force_refresh else self.cache.load()
        if cached is not None:
            yield DiscoveryPhase(Phase.FAST, cached, from_cache=True)
            yield DiscoveryPhase(Phase.COMPLETE, cached, from_cache=True)
            self._start_refresh(home, on_refresh)
            return

        with self._scan_lock:
            yield from self._cold_run(home, cancel)

    def wait_for_refresh(self, timeout: Optional[float] = None) -> bool:
        """Block until any background refresh finishes. Returns False on timeout."""
        thread = self._refresh_thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    @property
    def refreshing(self) -> bool:
        thread = self._refresh_thread
        return thread is not None and thread.is_alive()

    def close(self, timeout: Optional[float] = None) -> None:
        """Cancel a running background refresh and wait for it to stop."""
        self._refresh_cancel.set()
        self.wait_for_refresh(timeout)

    # ---- Scanning ----

    def _cold_run(self, home: Path, cancel: Optional[threading.Event]) -> Iterator[DiscoveryPhase]:
        t0 = time.monotonic()

        fast = self._build_all(conventional_candidates(home, self.config.extra_locations), cancel)
        log.info("--- Conventional locations (%.1fs) ---", time.monotonic() - t0)
        log.info("  %d projects", len(fast))
        yield DiscoveryPhase(Phase.FAST, sort_projects(fast), cancelled=_is_set(cancel))

        t1 = time.monotonic()
        known = {p.path for p in fast}
        swept = self._build_all(home_candidates(home), cancel, skip=known)
        log.info("--- Home sweep (%.1fs) ---", time.monotonic() - t1)
        log.info("  %d additional projects", len(swept))

        merged = sort_projects(merge_projects(fast, swept))
        cancelled = _is_set(cancel)
        if cancelled:
            log.info("Discovery cancelled after %d projects; cache not updated", len(merged))
        else:
            self._persist(merged)

        log.info("--- Discovery complete (%.1fs, %d projects) ---", time.monotonic() - t0, len(merged))
        yield DiscoveryPhase(Phase.COMPLETE, merged, cancelled=cancelled)

    def _scan(self, home: Path, cancel: Optional[threading.Event]) -> tuple[list[ProjectRecord], bool]:
        """Run a full cold scan without yielding. Returns (projects, cancelled)."""
        final: list[ProjectRecord] = []
        cancelled = False
        for step in self._cold_run(home, cancel):
            if step.phase == Phase.COMPLETE:
                final, cancelled = step.projects, step.cancelled
        return final, cancelled

    def _build_all(
        self,
        candidates: Iterable[Path],
        cancel: Optional[threading.Event],
        skip: frozenset[str] | set[str] = frozenset(),
    ) -> list[ProjectRecord]:
        paths: list[str] = []
        seen: set[str] = set()
        for candidate in candidates:
            if _is_set(cancel):
                break
            path = os.path.abspath(candidate)
            if path in skip or path in seen:
                continue
            seen.add(path)
            paths.append(path)

        if not paths:
            return []

        records: list[ProjectRecord] = []
        with ThreadPoolExecutor(max_workers=self.config.workers, thread_name_prefix="devdug-build") as pool:
            futures = [
                pool.submit(build_project, path, self.config.size_strategy, self.config.du_timeout)
                for path in paths
            ]
            for path, future in zip(paths, futures):
                if _is_set(cancel):
                    for pending in futures:
                        pending.cancel()
                    break
                try:
                    record = future.result()
                except Exception as e:
                    log.debug("Skipping %s: %s", path, e, exc_info=True)
                    continue
                if record is not None:
                    log.debug("  %s (%s)", record.name, ", ".join(eco.value for eco in record.ecosystems))
                    records.append(record)
        return records

    def _persist(self, projects: list[ProjectRecord]) -> None:
        try:
            self.cache.save(projects)
        except OSError as e:
            log.warning("Could not write cache %s: %s", self.cache.path, e)

    # ---- Background refresh ----

    def _start_refresh(self, home: Path, on_refresh: Optional[ProjectsCallback]) -> None:
        if self.refreshing:
            log.debug("Background refresh already running")
            return
        self._refresh_cancel = threading.Event()
        self._refresh_thread = threading.Thread(
            target=self._refresh,
            args=(home, on_refresh, self._refresh_cancel),
            name="devdug-refresh",
            daemon=True,
        )
        self._refresh_thread.start()

    def _refresh(
        self,
        home: Path,
        on_refresh: Optional[ProjectsCallback],
        cancel: threading.Event,
    ) -> None:
        if not self._scan_lock.acquire(blocking=False):
            log.info("Scan already in progress, skipping background refresh")
            return
        try:
            log.info("Refreshing cache in background")
            projects, cancelled = self._scan(home, cancel)
        except Exception:
            log.warning("Background refresh failed", exc_info=True)
            return
        finally:
            self._scan_lock.release()

        if cancelled:
            return
        if on_refresh:
            try:
                on_refresh(projects)
            except Exception:
                log.warning("on_refresh callback failed", exc_info=True)
