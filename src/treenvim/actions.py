"""Action dispatcher: runs keymap actions against one open tree view."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, assert_never

from treenvim import InvalidTransition, TreeNvimError
from treenvim.fsops import FileOperations, resolve_target
from treenvim.host import Host, NotifyLevel
from treenvim.incremental import ChunkedListing
from treenvim.keymaps import Action
from treenvim.navigation import NavigationContext
from treenvim.render import draw_chunk, draw_snapshot, finish_snapshot
from treenvim.snapshot import Entry, ListingSnapshot

if TYPE_CHECKING:
    from treenvim.config import TreeConfig

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """Maps actions onto navigation transitions and collaborator calls.

    Errors raised by a transition or collaborator are reported through
    ``host.notify`` and never propagate out of :meth:`dispatch`.

    Args:
        context: Navigation state of the view.
        host: Editor collaborator.
        surface: Host surface the view is drawn on.
        config: View settings.
        fs: Filesystem mutation collaborator.
        background: Worker used by ``context`` in incremental mode.
        on_close: Called once after the view closes.
    """

    def __init__(
        self,
        context: NavigationContext,
        host: Host,
        surface: Any,
        config: TreeConfig,
        fs: FileOperations | None = None,
        background: ChunkedListing | None = None,
        on_close: Callable[[ActionDispatcher], None] | None = None,
    ) -> None:
        self.context = context
        self.surface = surface
        self._host = host
        self._config = config
        self._fs = fs or FileOperations()
        self._background = background
        self._on_close = on_close
        self.closed = False

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def redraw(self) -> None:
        snapshot = self.context.snapshot
        if snapshot is None:
            return
        draw_snapshot(
            self._host,
            self.surface,
            snapshot,
            self.context.cursor_line,
            self._config.width_padding,
            self.context.origin_line,
        )

    def _show(self, snapshot: ListingSnapshot | None) -> None:
        # ``None`` means the listing runs in the background; chunks draw it.
        if snapshot is not None:
            self.redraw()

    def _restore(self) -> None:
        # A failed background listing may have drawn part of its entries.
        if self.context.snapshot is None:
            self.close()
        else:
            self.redraw()

    def drain_chunks(self) -> None:
        """Apply finished background chunks; runs on the host thread."""
        if self._background is None:
            return
        for chunk in self._background.drain():
            try:
                outcome = self.context.accept_chunk(chunk)
            except BaseException:
                self._restore()
                raise
            if outcome is None:
                continue
            if outcome.error is not None:
                self._report(outcome.error)
                self._restore()
                continue
            draw_chunk(self._host, self.surface, outcome.entries, outcome.first_line)
            if outcome.snapshot is not None:
                finish_snapshot(
                    self._host,
                    self.surface,
                    outcome.snapshot,
                    self.context.cursor_line,
                    self._config.width_padding,
                    self.context.origin_line,
                )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch(self, action: Action, line: int | None = None) -> None:
        """Run ``action`` with the cursor on 1-based ``line``.

        Args:
            action: Action bound to the pressed key.
            line: Cursor line; read from the host when omitted.
        """
        if self.closed:
            return
        if line is None:
            line = self._host.get_cursor(self.surface)
        self.context.move_cursor(line)
        logger.debug("Dispatching %s on line %d", action.value, line)

        try:
            self._run(action, line)
        except TreeNvimError as exc:
            self._report(exc)

    def _report(self, exc: TreeNvimError) -> None:
        level = NotifyLevel.INFO if isinstance(exc, InvalidTransition) else NotifyLevel.ERROR
        self._host.notify(str(exc), level)

    def _run(self, action: Action, line: int) -> None:
        context = self.context
        match action:
            case Action.CLOSE_TREE:
                self.close()
            case Action.SELECT:
                self._select(line)
            case Action.OUT_DIR:
                self._show(context.ascend())
            case Action.IN_DIR:
                self._in_dir()
            case Action.INC_LIMIT:
                self._show(context.increase_depth())
            case Action.DEC_LIMIT:
                self._show(context.decrease_depth())
            case Action.YANK_ABS_PATH:
                self._yank(str(self._require_entry().path))
            case Action.YANK_REL_PATH:
                self._yank(os.path.relpath(self._require_entry().path, self._host.cwd()))
            case Action.CREATE:
                self._create()
            case Action.DELETE:
                self._delete()
            case Action.RENAME:
                self._rename()
            case Action.REFRESH:
                self._show(context.refresh())
            case _:
                assert_never(action)

    def _require_entry(self) -> Entry:
        entry = self.context.cursor_entry()
        if entry is None:
            raise InvalidTransition(f"line {self.context.cursor_line} no longer exists")
        return entry

    def _select(self, line: int) -> None:
        result = self.context.select(line)
        if result.open_path is None:
            self._show(result.snapshot)
            return
        if self._config.close_on_select:
            self.close()
        self._host.open_file(self.surface, result.open_path)

    def _in_dir(self) -> None:
        entry = self._require_entry()
        target = entry.path if entry.is_dir else entry.path.parent
        self._show(self.context.descend(target))

    def _yank(self, text: str) -> None:
        self._host.write_clipboard(text)
        self._host.notify(f"yanked {text}")

    def _create(self) -> None:
        entry = self.context.cursor_entry()
        if entry is None:
            base = self.context.root
        else:
            base = entry.path if entry.is_dir else entry.path.parent
        answer = self._host.prompt("Create (end with / for a directory): ", f"{base}{os.sep}")
        if not answer.strip():
            return
        target = resolve_target(answer.strip(), base)
        self._fs.create_path(target, directory=answer.rstrip().endswith(("/", os.sep)))
        self._show(self.context.refresh(focus=target))

    def _delete(self) -> None:
        entry = self._require_entry()
        if not self._host.confirm(f"Delete {entry.path}?"):
            return
        self._fs.delete_path(entry.path, recursive=True)
        self._show(self.context.refresh())

    def _rename(self) -> None:
        entry = self._require_entry()
        answer = self._host.prompt("Rename to: ", str(entry.path)).strip()
        if not answer:
            return
        target = resolve_target(answer, entry.path.parent)
        if target == entry.path:
            return
        self._fs.rename_path(entry.path, target)
        self._show(self.context.refresh(focus=target))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.context.close()
        self._host.close_surface(self.surface)
        if self._on_close is not None:
            on_close, self._on_close = self._on_close, None
            on_close(self)
