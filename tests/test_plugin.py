"""Tests for treenvim.plugin — command wiring with a recording host."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from conftest import RecordingHost

from treenvim.host import NotifyLevel
from treenvim.plugin import CONFIG_VARIABLE, TreePlugin


@pytest.fixture
def plugin(host: RecordingHost) -> TreePlugin:
    nvim = MagicMock()
    nvim.vars = {CONFIG_VARIABLE: {"provider": "scan", "icons_enabled": False}}
    tree_plugin = TreePlugin(nvim)
    tree_plugin._host = host  # type: ignore[assignment]
    return tree_plugin


class TestTreeCommand:
    def test_opens_and_registers_view(self, plugin: TreePlugin, host: RecordingHost, scenario_tree: Path) -> None:
        plugin.tree_command(["root"])
        assert host.lines == ["a.txt", "b.txt", "sub"]
        assert len(plugin.views) == 1

    def test_defaults_to_document_directory(
        self, plugin: TreePlugin, host: RecordingHost, scenario_tree: Path
    ) -> None:
        host.document = scenario_tree / "sub" / "c.txt"
        plugin.tree_command([])
        assert host.lines == ["c.txt"]

    def test_missing_directory_notifies(self, plugin: TreePlugin, host: RecordingHost) -> None:
        plugin.tree_command(["missing"])
        assert host.notifications[-1][1] is NotifyLevel.ERROR
        assert len(plugin.views) == 0

    def test_bad_config_notifies(self, plugin: TreePlugin, host: RecordingHost, scenario_tree: Path) -> None:
        plugin.nvim.vars = {CONFIG_VARIABLE: {"limit": 0}}
        plugin.tree_command(["root"])
        assert host.notifications == [("limit must be greater than 0", NotifyLevel.ERROR)]
        assert host.surfaces == []


class TestTreeAction:
    def test_close_unregisters(self, plugin: TreePlugin, host: RecordingHost, scenario_tree: Path) -> None:
        plugin.tree_command(["root"])
        plugin.nvim.current.buffer.number = host.surfaces[0].key
        plugin.tree_action(["close-tree"])
        assert len(plugin.views) == 0
        assert host.closed == host.surfaces

    def test_unknown_buffer_is_ignored(self, plugin: TreePlugin, host: RecordingHost) -> None:
        plugin.nvim.current.buffer.number = 99
        plugin.tree_action(["close-tree"])
        assert host.closed == []

    def test_buf_wipeout_forgets_view(self, plugin: TreePlugin, host: RecordingHost, scenario_tree: Path) -> None:
        plugin.tree_command(["root"])
        plugin.on_buf_wipeout(host.surfaces[0].key)
        assert len(plugin.views) == 0
