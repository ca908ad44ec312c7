"""Bounded directory walks.

Every walk stops as soon as a depth, result-count or time cap is hit, so a
single pathological tree (a node_modules with 200k files) cannot hang a
scan. Protected directories are pruned during the walk, never descended.
"""

import logging
import os
import time
from pathlib import Path
from typing import Callable, Generator, Optional

from pydantic import BaseModel, Field

from osoptimize.classifier import is_protected_name, should_exclude_file

logger = logging.getLogger(__name__)

FilePredicate = Callable[[Path, os.stat_result], bool]

SECONDS_PER_DAY = 24 * 60 * 60


class ScanCaps(BaseModel):
    """Hard limits for a single walk. None means unbounded."""

    max_depth: Optional[int] = Field(None, ge=1, description="Deepest entry level (root children = 1)")
    max_results: Optional[int] = Field(None, ge=0, description="Stop after this many files")
    max_dirs_sampled: Optional[int] = Field(
        None, ge=0, description="Stop after this many matching directories"
    )
    time_budget: Optional[float] = Field(None, gt=0, description="Wall-clock budget in seconds")


class _Deadline:
    """Tracks the time budget of one walk."""

    def __init__(self, budget: float | None) -> None:
        self._expires = time.monotonic() + budget if budget else None

    def expired(self) -> bool:
        return self._expires is not None and time.monotonic() >= self._expires


def older_than(days: int, now: float | None = None) -> FilePredicate:
    """Build a predicate matching files last modified more than `days` days ago."""
    cutoff = (now if now is not None else time.time()) - days * SECONDS_PER_DAY

    def _predicate(path: Path, st: os.stat_result) -> bool:
        return st.st_mtime < cutoff

    return _predicate


def not_excluded(path: Path, st: os.stat_result) -> bool:
    """Predicate rejecting protected paths."""
    return not should_exclude_file(path)


def all_of(*predicates: FilePredicate | None) -> FilePredicate:
    """Combine predicates; None entries are ignored."""
    active = [p for p in predicates if p is not None]

    def _predicate(path: Path, st: os.stat_result) -> bool:
        return all(p(path, st) for p in active)

    return _predicate


def _sorted_entries(directory: Path) -> list[os.DirEntry]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda e: e.name)


def walk_files(
    root: Path,
    predicate: FilePredicate | None = None,
    caps: ScanCaps | None = None,
) -> Generator[Path, None, None]:
    """
    Yield regular files under `root` that satisfy `predicate`.

    Symlinks are never followed or yielded. Unreadable directories and
    files are skipped; a missing root yields nothing.

    Args:
        root: Directory to walk
        predicate: Optional callable(path, stat) deciding inclusion
        caps: Depth, result and time limits

    Yields:
        Paths to matching files, in name order
    """
    caps = caps or ScanCaps()
    deadline = _Deadline(caps.time_budget)
    found = 0

    if caps.max_results == 0:
        return

    stack: list[tuple[Path, int]] = [(root, 1)]
    while stack:
        directory, depth = stack.pop()
        try:
            entries = _sorted_entries(directory)
        except (PermissionError, OSError):
            continue

        subdirs: list[Path] = []
        for entry in entries:
            if deadline.expired():
                logger.debug("Time budget exhausted walking %s", root)
                return
            try:
                if entry.is_dir(follow_symlinks=False):
                    if is_protected_name(entry.name):
                        continue
                    if caps.max_depth is None or depth < caps.max_depth:
                        subdirs.append(Path(entry.path))
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue

                path = Path(entry.path)
                if predicate is not None and not predicate(path, entry.stat(follow_symlinks=False)):
                    continue
            except (PermissionError, OSError):
                continue

            yield path
            found += 1
            if caps.max_results is not None and found >= caps.max_results:
                return

        for subdir in reversed(subdirs):
            stack.append((subdir, depth + 1))


def find_directories(
    root: Path,
    name: str,
    caps: ScanCaps | None = None,
) -> Generator[Path, None, None]:
    """
    Yield directories called `name` under `root`.

    Matched directories are not searched further (no node_modules inside
    node_modules). Protected directories are pruned.

    Args:
        root: Directory to search
        name: Directory name to match
        caps: max_depth bounds the match level, max_dirs_sampled the match count

    Yields:
        Paths to matching directories
    """
    caps = caps or ScanCaps()
    deadline = _Deadline(caps.time_budget)
    found = 0

    if caps.max_dirs_sampled == 0:
        return

    stack: list[tuple[Path, int]] = [(root, 1)]
    while stack:
        directory, depth = stack.pop()
        try:
            entries = _sorted_entries(directory)
        except (PermissionError, OSError):
            continue

        subdirs: list[Path] = []
        for entry in entries:
            if deadline.expired():
                logger.debug("Time budget exhausted searching %s for %s", root, name)
                return
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue
            if is_protected_name(entry.name):
                continue

            if entry.name == name:
                yield Path(entry.path)
                found += 1
                if caps.max_dirs_sampled is not None and found >= caps.max_dirs_sampled:
                    return
                continue

            if caps.max_depth is None or depth < caps.max_depth:
                subdirs.append(Path(entry.path))

        for subdir in reversed(subdirs):
            stack.append((subdir, depth + 1))


def list_children(root: Path) -> list[Path]:
    """List the direct children of a directory, or nothing if unreadable."""
    try:
        return [Path(entry.path) for entry in _sorted_entries(root)]
    except (PermissionError, OSError):
        return []
