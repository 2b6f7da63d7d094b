"""Tests for treenvim.resolver."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from treenvim import MalformedEntry
from treenvim.resolver import Kind, classify, join_normalized, resolve_line, resolve_node


class TestResolveLine:
    def test_root_line_is_skipped(self, scenario_tree: Path) -> None:
        assert resolve_line(".", scenario_tree) is None

    @pytest.mark.parametrize(
        ("line", "rel", "kind", "depth"),
        [
            ("|-- ./a.txt", "a.txt", Kind.FILE, 0),
            ("`-- ./sub", "sub", Kind.DIRECTORY, 0),
            ("    `-- ./sub/c.txt", "sub/c.txt", Kind.FILE, 1),
            ("|   `-- ./sub/c.txt", "sub/c.txt", Kind.FILE, 1),
        ],
    )
    def test_child_lines(self, scenario_tree: Path, line: str, rel: str, kind: Kind, depth: int) -> None:
        resolved = resolve_line(line, scenario_tree)
        assert resolved is not None
        assert resolved.path == scenario_tree / rel
        assert resolved.kind is kind
        assert resolved.depth == depth

    def test_hidden_names_keep_their_dot(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("x")
        resolved = resolve_line("|-- ./.env", tmp_path)
        assert resolved is not None
        assert resolved.name == ".env"

    def test_missing_path_defaults_to_file(self, tmp_path: Path) -> None:
        resolved = resolve_line("|-- ./vanished", tmp_path)
        assert resolved is not None
        assert resolved.kind is Kind.FILE

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_symlink_arrow_resolves_to_link(self, scenario_tree: Path) -> None:
        (scenario_tree / "link").symlink_to(scenario_tree / "sub")
        resolved = resolve_line("|-- ./link -> " + str(scenario_tree / "sub"), scenario_tree)
        assert resolved is not None
        assert resolved.path == scenario_tree / "link"
        assert resolved.kind is Kind.DIRECTORY

    def test_arrow_in_regular_name_is_kept(self, tmp_path: Path) -> None:
        (tmp_path / "a -> b").write_text("x")
        resolved = resolve_line("|-- ./a -> b", tmp_path)
        assert resolved is not None
        assert resolved.name == "a -> b"

    @pytest.mark.parametrize("line", ["|-- no-marker", "tree: error opening dir", "|-- x./y"])
    def test_malformed_lines_raise(self, tmp_path: Path, line: str) -> None:
        with pytest.raises(MalformedEntry):
            resolve_line(line, tmp_path)


class TestResolveNode:
    def test_directory_node(self, scenario_tree: Path) -> None:
        resolved = resolve_node({"type": "directory", "name": "./sub", "contents": []}, scenario_tree, 0)
        assert resolved.path == scenario_tree / "sub"
        assert resolved.is_dir

    @pytest.mark.parametrize("node_type", ["file", "socket", "fifo"])
    def test_non_directory_types_are_files(self, tmp_path: Path, node_type: str) -> None:
        resolved = resolve_node({"type": node_type, "name": "./x"}, tmp_path, 2)
        assert resolved.kind is Kind.FILE
        assert resolved.depth == 2

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_link_nodes_follow_their_target(self, scenario_tree: Path) -> None:
        (scenario_tree / "to-sub").symlink_to("sub")
        (scenario_tree / "dangling").symlink_to("missing")
        assert resolve_node({"type": "link", "name": "./to-sub"}, scenario_tree, 0).is_dir
        assert resolve_node({"type": "link", "name": "./dangling"}, scenario_tree, 0).kind is Kind.FILE

    @pytest.mark.parametrize(
        "node",
        [
            ["./a"],
            {"type": "file"},
            {"type": "file", "name": ""},
            {"name": "./a"},
        ],
    )
    def test_malformed_nodes_raise(self, tmp_path: Path, node: object) -> None:
        with pytest.raises(MalformedEntry):
            resolve_node(node, tmp_path, 0)


class TestHelpers:
    def test_join_normalized_collapses_dots(self) -> None:
        assert join_normalized(Path("/r"), "./a/../b") == Path("/r/b")

    def test_classify(self, scenario_tree: Path) -> None:
        assert classify(scenario_tree / "sub") is Kind.DIRECTORY
        assert classify(scenario_tree / "a.txt") is Kind.FILE
        assert classify(scenario_tree / "nope") is Kind.FILE
