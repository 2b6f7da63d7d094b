"""Draw snapshots and incremental chunks onto a host surface."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from treenvim.host import Host
from treenvim.snapshot import Entry, ListingSnapshot

# Rounded border adds one row above and one below.
BORDER_HEIGHT = 2

# Buffer mark left on the line of the document the view was opened from.
ORIGIN_MARK = "a"


def view_title(root: Path, depth_limit: int) -> str:
    name = root.name
    return f"tree {name}/ -L {depth_limit}" if name else f"tree / -L {depth_limit}"


def view_size(
    snapshot: ListingSnapshot,
    editor_size: tuple[int, int],
    width_padding: int,
) -> tuple[int, int]:
    """Return ``(width, height)`` for the view, bounded by the editor.

    Args:
        snapshot: Snapshot being shown.
        editor_size: ``(columns, lines)`` of the editor.
        width_padding: Columns added to the longest display line.
    """
    columns, lines = editor_size
    title = view_title(snapshot.root, snapshot.depth_limit)
    width = max(len(title), snapshot.max_line_width + width_padding)
    height = max(len(snapshot), 1)
    return max(min(width, columns), 1), max(min(height, lines - 1 - BORDER_HEIGHT), 1)


def highlight_icons(host: Host, surface: Any, entries: Sequence[Entry], first_line: int) -> None:
    for row, entry in enumerate(entries, start=first_line - 1):
        if entry.icon_offset is None or entry.icon_highlight is None:
            continue
        host.highlight(surface, row, entry.icon_offset, entry.icon_offset + entry.icon_width, entry.icon_highlight)


def draw_snapshot(
    host: Host,
    surface: Any,
    snapshot: ListingSnapshot,
    cursor_line: int,
    width_padding: int,
    origin_line: int | None = None,
) -> None:
    """Replace the surface contents with ``snapshot`` and place the cursor."""
    host.clear_highlights(surface)
    host.set_lines(surface, 0, snapshot.display_lines)
    highlight_icons(host, surface, snapshot.entries, 1)
    finish_snapshot(host, surface, snapshot, cursor_line, width_padding, origin_line)


def finish_snapshot(
    host: Host,
    surface: Any,
    snapshot: ListingSnapshot,
    cursor_line: int,
    width_padding: int,
    origin_line: int | None = None,
) -> None:
    """Resize and retitle the view, mark the origin line and place the cursor."""
    width, height = view_size(snapshot, host.editor_size(), width_padding)
    host.resize(surface, width, height, view_title(snapshot.root, snapshot.depth_limit))
    if origin_line is not None:
        host.set_mark(surface, ORIGIN_MARK, origin_line)
    host.set_cursor(surface, cursor_line)


def draw_chunk(host: Host, surface: Any, entries: Sequence[Entry], first_line: int) -> None:
    """Write ``entries`` starting at 1-based ``first_line``.

    The first chunk of a listing replaces everything; later chunks append.
    """
    if first_line == 1:
        host.clear_highlights(surface)
    host.set_lines(surface, first_line - 1, [entry.display_text for entry in entries])
    highlight_icons(host, surface, entries, first_line)
