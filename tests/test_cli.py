"""Tests for treenvim.cli — CLI entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from treenvim import TreeNvimError
from treenvim.cli import main, run_treenvim


class TestRunTreenvim:
    def test_default_output(self, scenario_tree: Path) -> None:
        assert run_treenvim([str(scenario_tree)]) == "a.txt\nb.txt\nsub"

    def test_level(self, scenario_tree: Path) -> None:
        output = run_treenvim([str(scenario_tree), "-L", "2"])
        assert output.splitlines() == ["a.txt", "b.txt", "sub", "  c.txt"]

    def test_exclude(self, scenario_tree: Path) -> None:
        output = run_treenvim([str(scenario_tree), "-I", "*.txt"])
        assert output == "sub"

    def test_gitignore(self, scenario_tree: Path) -> None:
        (scenario_tree / ".gitignore").write_text("a.txt\n")
        output = run_treenvim([str(scenario_tree), "--gitignore"])
        assert "a.txt" not in output.splitlines()
        assert ".gitignore" in output.splitlines()

    def test_icons(self, scenario_tree: Path) -> None:
        output = run_treenvim([str(scenario_tree), "--icons"])
        assert output.splitlines() == ["- a.txt", "- b.txt", "+ sub"]

    def test_nonexistent_directory(self, tmp_path: Path) -> None:
        with pytest.raises(TreeNvimError, match="is not a directory"):
            run_treenvim([str(tmp_path / "missing")])

    def test_invalid_level(self, scenario_tree: Path) -> None:
        with pytest.raises(TreeNvimError, match="greater than 0"):
            run_treenvim([str(scenario_tree), "-L", "0"])


class TestMain:
    def test_prints_listing(
        self, scenario_tree: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.argv", ["treenvim", str(scenario_tree)])
        main()
        assert capsys.readouterr().out == "a.txt\nb.txt\nsub\n"

    def test_error_exits_1(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.argv", ["treenvim", str(tmp_path / "missing")])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("treenvim: ")
