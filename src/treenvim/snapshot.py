"""Entries and listing snapshots: the ordered line-to-path mapping."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from treenvim.formatter.line import FormattedLine, LineFormatter
from treenvim.resolver import Kind, ResolvedPath


@dataclass(frozen=True, slots=True)
class Entry:
    """One filesystem node shown as one display line.

    Attributes:
        path: Normalized absolute path.
        kind: File or directory.
        depth: Nesting level below the listing root (children are 0).
        display_text: Indentation, optional icon and basename.
        icon_offset: Byte offset of the icon glyph in ``display_text``.
        icon_width: Byte length of the icon glyph.
        icon_highlight: Highlight group for the glyph.
    """

    path: Path
    kind: Kind
    depth: int
    display_text: str
    icon_offset: int | None = None
    icon_width: int = 0
    icon_highlight: str | None = None

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_dir(self) -> bool:
        return self.kind is Kind.DIRECTORY


def make_entries(resolved: Sequence[ResolvedPath], formatter: LineFormatter) -> list[Entry]:
    """Format ``resolved`` and pair each with its display line."""
    formatted: list[FormattedLine] = formatter.format_many(resolved)
    return [
        Entry(
            path=r.path,
            kind=r.kind,
            depth=r.depth,
            display_text=f.text,
            icon_offset=f.icon_offset,
            icon_width=f.icon_width,
            icon_highlight=f.icon_highlight,
        )
        for r, f in zip(resolved, formatted, strict=True)
    ]


@dataclass(frozen=True)
class ListingSnapshot:
    """The ordered entries produced by one listing.

    Display line ``n`` (1-based) shows ``entries[n - 1]``.

    Attributes:
        root: Absolute directory that was listed.
        depth_limit: Depth limit the listing was requested with.
        entries: Entries in pre-order.
    """

    root: Path
    depth_limit: int
    entries: tuple[Entry, ...] = ()
    _lines_by_path: dict[Path, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        lines_by_path: dict[Path, int] = {}
        for idx, entry in enumerate(self.entries, start=1):
            lines_by_path.setdefault(entry.path, idx)
        object.__setattr__(self, "_lines_by_path", lines_by_path)

    @classmethod
    def build(cls, root: Path, depth_limit: int, entries: Iterable[Entry]) -> ListingSnapshot:
        return cls(root=root, depth_limit=depth_limit, entries=tuple(entries))

    def __len__(self) -> int:
        return len(self.entries)

    def entry_at(self, line: int) -> Entry | None:
        """Return the entry on 1-based display ``line``, if any."""
        if 1 <= line <= len(self.entries):
            return self.entries[line - 1]
        return None

    def line_of(self, path: Path | None) -> int | None:
        """Return the 1-based display line showing ``path``, if listed."""
        if path is None:
            return None
        return self._lines_by_path.get(path)

    @property
    def display_lines(self) -> list[str]:
        return [entry.display_text for entry in self.entries]

    @property
    def max_line_width(self) -> int:
        return max((len(entry.display_text) for entry in self.entries), default=0)
