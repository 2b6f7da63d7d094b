"""In-process listing provider: pre-order directory walk with os.scandir."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from treenvim.resolver import Kind, ResolvedPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanOptions:
    """Options controlling scanner behavior.

    Attributes:
        depth_limit: Number of levels to list; ``1`` lists only the
            root's direct children. ``None`` means unlimited.
        all_files: Whether to include hidden entries.
    """

    depth_limit: int | None = None
    all_files: bool = True


class EntryFilter(Protocol):
    """Protocol for entry filtering.

    Keeps scanner logic decoupled from matching strategy.
    """

    def should_exclude(self, path: Path, is_dir: bool) -> bool: ...


class _NullFilter:
    """Default pass-through filter that excludes nothing."""

    def should_exclude(self, path: Path, is_dir: bool) -> bool:
        return False


def _children(
    directory: Path,
    depth: int,
    options: ScanOptions,
    entry_filter: EntryFilter,
) -> list[ResolvedPath]:
    """Return the sorted, filtered children of ``directory``."""
    try:
        raw_entries = list(os.scandir(directory))
    except OSError:
        logger.debug("Cannot read directory: %s", directory)
        return []

    raw_entries.sort(key=lambda e: e.name)

    children: list[ResolvedPath] = []
    for dir_entry in raw_entries:
        if not options.all_files and dir_entry.name.startswith("."):
            continue
        try:
            is_dir = dir_entry.is_dir()
        except OSError:
            logger.debug("Cannot stat: %s", dir_entry.path)
            is_dir = False

        path = Path(dir_entry.path)
        if entry_filter.should_exclude(path, is_dir):
            continue
        children.append(
            ResolvedPath(
                path=path,
                kind=Kind.DIRECTORY if is_dir else Kind.FILE,
                depth=depth,
            )
        )
    return children


def walk(
    root: Path,
    options: ScanOptions | None = None,
    entry_filter: EntryFilter | None = None,
) -> Iterator[ResolvedPath]:
    """Yield entries below ``root`` in pre-order, names sorted per directory.

    A directory is always yielded immediately before its children. The
    root itself is not yielded.

    Args:
        root: Absolute directory to walk.
        options: Scanner options. Defaults to ``ScanOptions()``.
        entry_filter: Optional exclude filter implementation.

    Yields:
        ResolvedPath: One entry per filesystem node.
    """
    scan_options = options or ScanOptions()
    active_filter = entry_filter or _NullFilter()

    # Stack holds entries still to be yielded, last-pushed first.
    # Children are pushed in reverse so the alphabetically first pops first.
    stack: list[ResolvedPath] = list(reversed(_children(root, 0, scan_options, active_filter)))

    while stack:
        entry = stack.pop()
        yield entry

        # Linked directories are listed but not entered, as `tree` does without -l.
        if not entry.is_dir or entry.path.is_symlink():
            continue
        child_depth = entry.depth + 1
        if scan_options.depth_limit is not None and child_depth >= scan_options.depth_limit:
            continue
        stack.extend(reversed(_children(entry.path, child_depth, scan_options, active_filter)))
