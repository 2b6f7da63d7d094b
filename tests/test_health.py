"""Tests for treenvim.health."""

from __future__ import annotations

import pytest

from treenvim import health
from treenvim.health import check_health


class TestCheckHealth:
    def test_tree_installed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(health.shutil, "which", lambda name: "/usr/bin/tree")
        (item,) = check_health()
        assert item.ok
        assert item.message == "tree is installed"

    def test_tree_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(health.shutil, "which", lambda name: None)
        (item,) = check_health()
        assert not item.ok
        assert item.advice is not None

    def test_tree_missing_is_fine_for_scan(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(health.shutil, "which", lambda name: None)
        (item,) = check_health(provider="scan")
        assert item.ok

    @pytest.mark.parametrize("loadable", [True, False])
    def test_icons(self, monkeypatch: pytest.MonkeyPatch, loadable: bool) -> None:
        monkeypatch.setattr(health.shutil, "which", lambda name: "/usr/bin/tree")
        items = check_health(icons_enabled=True, icons_loadable=lambda: loadable)
        assert items[-1].ok is loadable
