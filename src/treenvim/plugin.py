"""pynvim remote plugin exposing ``:Tree``, ``:TreeHealth`` and ``TreeAction()``."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pynvim

from treenvim import TreeNvimError
from treenvim.actions import ActionDispatcher
from treenvim.config import TreeConfig
from treenvim.health import check_health
from treenvim.host import MiniIconsProvider, NotifyLevel, NvimHost
from treenvim.keymaps import Action
from treenvim.view import ViewRegistry, open_view

logger = logging.getLogger(__name__)

CONFIG_VARIABLE = "tree_nvim"


@pynvim.plugin
class TreePlugin:
    def __init__(self, nvim: pynvim.Nvim) -> None:
        self.nvim = nvim
        self.views = ViewRegistry()
        self._host: NvimHost | None = None

    @property
    def host(self) -> NvimHost:
        # Created lazily: the API must not be called from __init__.
        if self._host is None:
            self._host = NvimHost(self.nvim)
        return self._host

    def _load_config(self) -> TreeConfig:
        return TreeConfig.from_mapping(self.nvim.vars.get(CONFIG_VARIABLE))

    def _resolve_root(self, arg: str | None, origin: Path | None) -> Path:
        if arg:
            root = self.host.cwd() / os.path.expanduser(arg)
        elif origin is not None:
            root = origin.parent
        else:
            root = self.host.cwd()
        return Path(os.path.normpath(root))

    def _forget(self, dispatcher: ActionDispatcher) -> None:
        self.views.remove(dispatcher.surface.key)

    @pynvim.command("Tree", nargs="?", complete="dir", sync=True)
    def tree_command(self, args: list[str]) -> None:
        host = self.host
        try:
            config = self._load_config()
            icons = MiniIconsProvider.load(self.nvim) if config.icons_enabled else None
            origin = host.current_document()
            root = self._resolve_root(args[0] if args else None, origin)
            if not root.is_dir():
                host.notify(f"'{root}' is not a directory", NotifyLevel.ERROR)
                return
            dispatcher = open_view(host, config, root, origin, icons=icons, on_close=self._forget)
        except TreeNvimError as exc:
            host.notify(str(exc), NotifyLevel.ERROR)
            return
        self.views.add(dispatcher.surface.key, dispatcher)

    @pynvim.function("TreeAction", sync=True)
    def tree_action(self, args: list[str]) -> None:
        dispatcher = self.views.get(self.nvim.current.buffer.number)
        if dispatcher is None:
            return
        dispatcher.dispatch(Action(args[0]))

    @pynvim.command("TreeHealth", sync=True)
    def tree_health(self) -> None:
        try:
            config = self._load_config()
        except TreeNvimError as exc:
            self.host.notify(str(exc), NotifyLevel.ERROR)
            return
        items = check_health(
            provider=config.provider,
            icons_enabled=config.icons_enabled,
            icons_loadable=lambda: MiniIconsProvider.load(self.nvim) is not None,
        )
        for item in items:
            prefix = "OK" if item.ok else "ERROR"
            message = f"{prefix}: {item.message}" + (f" ({item.advice})" if item.advice else "")
            self.host.notify(message, NotifyLevel.INFO if item.ok else NotifyLevel.ERROR)

    @pynvim.autocmd("BufWipeout", pattern="*", eval="str2nr(expand('<abuf>'))", sync=True)
    def on_buf_wipeout(self, bufnr: int) -> None:
        dispatcher = self.views.remove(bufnr)
        if dispatcher is not None:
            dispatcher.context.close()
