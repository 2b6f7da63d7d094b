"""Navigation state for one open tree view.

Every transition re-lists from scratch and places the cursor by matching
carried-forward paths against the new snapshot: the focus paths first,
then the document the view was opened from, then line 1.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from treenvim import InvalidTransition, TreeNvimError
from treenvim.formatter.line import LineFormatter
from treenvim.incremental import ChunkedListing, ListingChunk
from treenvim.lister import ListingProvider, list_entries
from treenvim.resolver import Kind, classify
from treenvim.snapshot import Entry, ListingSnapshot, make_entries

logger = logging.getLogger(__name__)

MIN_DEPTH_LIMIT = 1


class ViewState(enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    LISTING = "listing"


@dataclass
class _PendingListing:
    generation: int
    root: Path
    depth_limit: int
    focus_paths: tuple[Path, ...]
    entries: list[Entry] = field(default_factory=list)


@dataclass(frozen=True)
class SelectResult:
    """Outcome of selecting a line.

    Attributes:
        open_path: File the host should open; ``None`` when a directory
            was descended into instead.
        snapshot: Snapshot installed by the descend, when it completed
            synchronously.
    """

    open_path: Path | None = None
    snapshot: ListingSnapshot | None = None


@dataclass(frozen=True)
class ChunkOutcome:
    """What the host has to draw after accepting one chunk.

    Attributes:
        entries: New entries to append, in order.
        first_line: 1-based display line of ``entries[0]``.
        snapshot: The installed snapshot once the listing is complete.
        error: Failure that ended the listing; the previous snapshot is
            still installed.
    """

    entries: tuple[Entry, ...] = ()
    first_line: int = 1
    snapshot: ListingSnapshot | None = None
    error: TreeNvimError | None = None


class NavigationContext:
    """Root, depth limit, snapshot and cursor of one tree view.

    Args:
        provider: Listing provider used for every re-list.
        formatter: Line formatter; decides whether icons are shown.
        root: Directory to list when the view opens.
        depth_limit: Initial depth limit (at least 1).
        origin_document: Document active when the view was opened.
        background: When given, re-lists run on its worker thread and
            transitions return ``None``; results arrive through
            :meth:`accept_chunk`.
    """

    def __init__(
        self,
        provider: ListingProvider,
        formatter: LineFormatter,
        root: Path,
        depth_limit: int = MIN_DEPTH_LIMIT,
        origin_document: Path | None = None,
        background: ChunkedListing | None = None,
    ) -> None:
        if depth_limit < MIN_DEPTH_LIMIT:
            raise InvalidTransition(f"depth limit must be at least {MIN_DEPTH_LIMIT}")
        self._provider = provider
        self._formatter = formatter
        self._background = background
        self.root = root
        self.depth_limit = depth_limit
        self.origin_document = origin_document
        self.snapshot: ListingSnapshot | None = None
        self.state = ViewState.CLOSED
        self.cursor_line = 1
        self.generation = 0
        self._pending: _PendingListing | None = None

    @property
    def icons_enabled(self) -> bool:
        return self._formatter.icons_enabled

    @property
    def origin_line(self) -> int | None:
        if self.snapshot is None:
            return None
        return self.snapshot.line_of(self.origin_document)

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------
    def move_cursor(self, line: int) -> None:
        """Record where the host's cursor is before running a transition."""
        self.cursor_line = line

    def cursor_entry(self) -> Entry | None:
        if self.snapshot is None:
            return None
        return self.snapshot.entry_at(self.cursor_line)

    def _cursor_path(self) -> tuple[Path, ...]:
        entry = self.cursor_entry()
        return (entry.path,) if entry is not None else ()

    def _place_cursor(self, snapshot: ListingSnapshot, focus_paths: Sequence[Path]) -> int:
        for candidate in (*focus_paths, self.origin_document):
            line = snapshot.line_of(candidate)
            if line is not None:
                return line
        return 1

    # ------------------------------------------------------------------
    # Listing lifecycle
    # ------------------------------------------------------------------
    def _require_open(self) -> None:
        if self.state is ViewState.CLOSED:
            raise InvalidTransition("tree view is closed")
        if self.state is ViewState.LISTING:
            raise InvalidTransition("a listing is still in progress")

    def _begin(self, root: Path, depth_limit: int, focus_paths: tuple[Path, ...]) -> int:
        self.generation += 1
        self._pending = _PendingListing(self.generation, root, depth_limit, focus_paths)
        self.state = ViewState.LISTING
        return self.generation

    def _abort(self, generation: int) -> None:
        if self._pending is None or self._pending.generation != generation:
            return
        self._pending = None
        self.state = ViewState.OPEN if self.snapshot is not None else ViewState.CLOSED

    def _install(self, generation: int) -> ListingSnapshot:
        pending = self._pending
        assert pending is not None and pending.generation == generation
        snapshot = ListingSnapshot.build(pending.root, pending.depth_limit, pending.entries)
        self._pending = None
        self.snapshot = snapshot
        self.root = pending.root
        self.depth_limit = pending.depth_limit
        self.cursor_line = self._place_cursor(snapshot, pending.focus_paths)
        self.state = ViewState.OPEN
        logger.debug(
            "Installed snapshot %d: %s -L %d, %d entries, cursor %d",
            generation,
            snapshot.root,
            snapshot.depth_limit,
            len(snapshot),
            self.cursor_line,
        )
        return snapshot

    def _relist(self, root: Path, depth_limit: int, focus_paths: tuple[Path, ...]) -> ListingSnapshot | None:
        generation = self._begin(root, depth_limit, focus_paths)
        if self._background is not None:
            self._background.start(root, depth_limit, generation)
            return None

        try:
            resolved = list_entries(self._provider, root, depth_limit)
            assert self._pending is not None
            self._pending.entries = make_entries(resolved, self._formatter)
        except BaseException:
            self._abort(generation)
            raise
        return self._install(generation)

    def accept_chunk(self, chunk: ListingChunk) -> ChunkOutcome | None:
        """Fold one background chunk into the pending listing.

        Must run on the host's thread. Chunks from a superseded or
        cancelled listing are discarded.

        Returns:
            ChunkOutcome | None: What to draw, or ``None`` for a stale chunk.
        """
        pending = self._pending
        if pending is None or chunk.generation != pending.generation:
            logger.debug("Discarding stale chunk from listing %d", chunk.generation)
            return None

        if chunk.error is not None:
            self._abort(chunk.generation)
            return ChunkOutcome(error=chunk.error)

        first_line = len(pending.entries) + 1
        try:
            new_entries = make_entries(chunk.entries, self._formatter)
        except TreeNvimError as exc:
            self._abort(chunk.generation)
            return ChunkOutcome(error=exc)
        except BaseException:
            self._abort(chunk.generation)
            raise
        pending.entries.extend(new_entries)

        snapshot = self._install(chunk.generation) if chunk.done else None
        return ChunkOutcome(entries=tuple(new_entries), first_line=first_line, snapshot=snapshot)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def open(self) -> ListingSnapshot | None:
        if self.state is not ViewState.CLOSED:
            raise InvalidTransition("tree view is already open")
        focus = (self.origin_document,) if self.origin_document is not None else ()
        return self._relist(self.root, self.depth_limit, focus)

    def descend(self, target: Path | None = None) -> ListingSnapshot | None:
        """List ``target`` (default: the cursor's entry) with depth limit 1."""
        self._require_open()
        if target is None:
            entry = self.cursor_entry()
            if entry is None:
                raise InvalidTransition(f"line {self.cursor_line} no longer exists")
            target = entry.path

        assert self.snapshot is not None
        line = self.snapshot.line_of(target)
        listed = self.snapshot.entry_at(line) if line is not None else None
        kind = listed.kind if listed is not None else classify(target)
        if kind is not Kind.DIRECTORY:
            raise InvalidTransition(f"'{target.name}' is not a directory")

        return self._relist(target, MIN_DEPTH_LIMIT, self._cursor_path())

    def ascend(self) -> ListingSnapshot | None:
        """List the parent of the current root, keeping the depth limit.

        The cursor follows its current entry when still listed, otherwise
        lands on the directory just left.
        """
        self._require_open()
        parent = self.root.parent
        if parent == self.root:
            raise InvalidTransition("already at the filesystem root")
        return self._relist(parent, self.depth_limit, (*self._cursor_path(), self.root))

    def increase_depth(self) -> ListingSnapshot | None:
        self._require_open()
        return self._relist(self.root, self.depth_limit + 1, self._cursor_path())

    def decrease_depth(self) -> ListingSnapshot | None:
        self._require_open()
        if self.depth_limit <= MIN_DEPTH_LIMIT:
            raise InvalidTransition(f"depth limit cannot go below {MIN_DEPTH_LIMIT}")
        return self._relist(self.root, self.depth_limit - 1, self._cursor_path())

    def refresh(self, focus: Path | None = None) -> ListingSnapshot | None:
        """Re-list unchanged root and depth.

        Args:
            focus: Path to put the cursor on instead of the cursor's
                current entry (e.g. a freshly created file).
        """
        self._require_open()
        focus_paths = (focus, *self._cursor_path()) if focus is not None else self._cursor_path()
        return self._relist(self.root, self.depth_limit, focus_paths)

    def select(self, line: int) -> SelectResult:
        """Descend into a directory line, or report a file line to open."""
        self._require_open()
        self.move_cursor(line)
        entry = self.cursor_entry()
        if entry is None:
            raise InvalidTransition(f"line {line} no longer exists")
        if entry.is_dir:
            return SelectResult(snapshot=self.descend(entry.path))
        return SelectResult(open_path=entry.path)

    def close(self) -> None:
        if self.state is ViewState.CLOSED:
            return
        # Any chunk still in flight becomes stale.
        self.generation += 1
        if self._background is not None:
            self._background.cancel()
        self._pending = None
        self.snapshot = None
        self.state = ViewState.CLOSED
