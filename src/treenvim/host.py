"""Editor-side collaborators: the Host protocol and its pynvim implementation."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import pynvim
from pynvim.api import Buffer, Window

from treenvim.keymaps import Action
from treenvim.formatter.icons import Icon
from treenvim.resolver import Kind

logger = logging.getLogger(__name__)

NAMESPACE = "Tree"
FILETYPE = "tree"


class NotifyLevel(enum.IntEnum):
    """Mirrors ``vim.log.levels``."""

    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4


class Host(Protocol):
    """Everything the tree view needs from the editor.

    ``surface`` values are opaque handles returned by :meth:`open_surface`.
    Line numbers are 1-based except for :meth:`highlight` and
    :meth:`set_lines`, which take 0-based rows like the Neovim API.
    """

    def open_surface(self, title: str, width: int, height: int) -> Any: ...

    def bind_keys(self, surface: Any, keymaps: Mapping[str, Action]) -> None: ...

    def set_lines(self, surface: Any, start: int, lines: Sequence[str]) -> None: ...

    def highlight(self, surface: Any, row: int, start_col: int, end_col: int, group: str) -> None: ...

    def clear_highlights(self, surface: Any) -> None: ...

    def set_cursor(self, surface: Any, line: int) -> None: ...

    def get_cursor(self, surface: Any) -> int: ...

    def set_mark(self, surface: Any, name: str, line: int) -> None: ...

    def resize(self, surface: Any, width: int, height: int, title: str) -> None: ...

    def close_surface(self, surface: Any) -> None: ...

    def editor_size(self) -> tuple[int, int]: ...

    def open_file(self, surface: Any, path: Path) -> None: ...

    def notify(self, message: str, level: NotifyLevel = NotifyLevel.INFO) -> None: ...

    def write_clipboard(self, text: str) -> None: ...

    def prompt(self, message: str, default: str = "") -> str: ...

    def confirm(self, message: str) -> bool: ...

    def cwd(self) -> Path: ...

    def current_document(self) -> Path | None: ...

    def schedule(self, callback: Callable[[], None]) -> None: ...


@dataclass
class NvimSurface:
    """Scratch buffer and floating window showing one tree view."""

    buffer: Buffer
    window: Window
    origin_window: Window

    @property
    def key(self) -> int:
        return self.buffer.number


class NvimHost:
    """:class:`Host` over a pynvim session."""

    def __init__(self, nvim: pynvim.Nvim) -> None:
        self._nvim = nvim
        self._namespace: int = nvim.api.create_namespace(NAMESPACE)

    def open_surface(self, title: str, width: int, height: int) -> NvimSurface:
        api = self._nvim.api
        origin_window = api.get_current_win()
        buffer = api.create_buf(False, True)
        for name, value in (("buftype", "nofile"), ("bufhidden", "wipe"), ("buflisted", False), ("filetype", FILETYPE)):
            api.set_option_value(name, value, {"buf": buffer.number})

        window = api.open_win(
            buffer,
            True,
            {
                "relative": "editor",
                "row": 1,
                "col": 0,
                "width": width,
                "height": height,
                "border": "rounded",
                "style": "minimal",
                "title": title,
            },
        )
        for name, value in (("foldmethod", "indent"), ("cursorline", True), ("signcolumn", "yes")):
            api.set_option_value(name, value, {"win": window.handle})
        return NvimSurface(buffer=buffer, window=window, origin_window=origin_window)

    def bind_keys(self, surface: NvimSurface, keymaps: Mapping[str, Action]) -> None:
        for key, action in keymaps.items():
            self._nvim.api.buf_set_keymap(
                surface.buffer,
                "n",
                key,
                f"<Cmd>call TreeAction('{action.value}')<CR>",
                {"noremap": True, "silent": True, "nowait": True},
            )

    def set_lines(self, surface: NvimSurface, start: int, lines: Sequence[str]) -> None:
        self._nvim.api.buf_set_lines(surface.buffer, start, -1, False, list(lines))

    def highlight(self, surface: NvimSurface, row: int, start_col: int, end_col: int, group: str) -> None:
        self._nvim.api.buf_set_extmark(
            surface.buffer,
            self._namespace,
            row,
            start_col,
            {"end_col": end_col, "hl_group": group},
        )

    def clear_highlights(self, surface: NvimSurface) -> None:
        self._nvim.api.buf_clear_namespace(surface.buffer, self._namespace, 0, -1)

    def set_cursor(self, surface: NvimSurface, line: int) -> None:
        self._nvim.api.win_set_cursor(surface.window, (line, 0))

    def get_cursor(self, surface: NvimSurface) -> int:
        row, _col = self._nvim.api.win_get_cursor(surface.window)
        return row

    def set_mark(self, surface: NvimSurface, name: str, line: int) -> None:
        self._nvim.api.buf_set_mark(surface.buffer, name, line, 0, {})

    def resize(self, surface: NvimSurface, width: int, height: int, title: str) -> None:
        self._nvim.api.win_set_config(surface.window, {"width": width, "height": height, "title": title})

    def close_surface(self, surface: NvimSurface) -> None:
        if self._nvim.api.win_is_valid(surface.window):
            self._nvim.api.win_close(surface.window, True)

    def editor_size(self) -> tuple[int, int]:
        return self._nvim.options["columns"], self._nvim.options["lines"]

    def open_file(self, surface: NvimSurface, path: Path) -> None:
        if self._nvim.api.win_is_valid(surface.origin_window):
            self._nvim.api.set_current_win(surface.origin_window)
        self._nvim.command("edit " + self._nvim.funcs.fnameescape(str(path)))

    def notify(self, message: str, level: NotifyLevel = NotifyLevel.INFO) -> None:
        self._nvim.api.notify(f"[tree.nvim] {message}", int(level), {})

    def write_clipboard(self, text: str) -> None:
        self._nvim.funcs.setreg('"', text)
        if self._nvim.funcs.has("clipboard"):
            self._nvim.funcs.setreg("+", text)

    def prompt(self, message: str, default: str = "") -> str:
        return self._nvim.funcs.input({"prompt": message, "default": default, "cancelreturn": ""})

    def confirm(self, message: str) -> bool:
        return self._nvim.funcs.confirm(message, "&Yes\n&No", 2) == 1

    def cwd(self) -> Path:
        return Path(self._nvim.funcs.getcwd())

    def current_document(self) -> Path | None:
        name = self._nvim.current.buffer.name
        return Path(name) if name else None

    def schedule(self, callback: Callable[[], None]) -> None:
        self._nvim.async_call(callback)


_MINI_ICONS_AVAILABLE = "return (pcall(require, 'mini.icons'))"

_MINI_ICONS_LOOKUP = """
local requests = ...
local mini_icons = require('mini.icons')
local out = {}
for _, req in ipairs(requests) do
  local glyph, hl = mini_icons.get(req[1], req[2])
  table.insert(out, { glyph, hl or vim.NIL })
end
return out
"""


class MiniIconsProvider:
    """Icon lookups through the ``mini.icons`` Lua module, one RPC per batch."""

    def __init__(self, nvim: pynvim.Nvim) -> None:
        self._nvim = nvim

    @classmethod
    def load(cls, nvim: pynvim.Nvim) -> MiniIconsProvider | None:
        """Return a provider when ``mini.icons`` can be required, else ``None``."""
        if not nvim.exec_lua(_MINI_ICONS_AVAILABLE):
            logger.debug("mini.icons is not available")
            return None
        return cls(nvim)

    def lookup(self, kind: Kind, path: Path) -> Icon:
        return self.lookup_many([(kind, path)])[0]

    def lookup_many(self, requests: Sequence[tuple[Kind, Path]]) -> list[Icon]:
        if not requests:
            return []
        payload = [[kind.value, str(path)] for kind, path in requests]
        results = self._nvim.exec_lua(_MINI_ICONS_LOOKUP, payload)
        return [Icon(glyph=glyph, highlight_group=hl) for glyph, hl in results]
