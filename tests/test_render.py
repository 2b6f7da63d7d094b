"""Tests for treenvim.render — view title and sizing."""

from __future__ import annotations

from pathlib import Path

import pytest

from treenvim.render import view_size, view_title
from treenvim.resolver import Kind
from treenvim.snapshot import Entry, ListingSnapshot


def _snapshot(names: list[str], root: Path = Path("/p/proj")) -> ListingSnapshot:
    return ListingSnapshot.build(
        root,
        1,
        [Entry(path=root / n, kind=Kind.FILE, depth=0, display_text=n) for n in names],
    )


class TestViewTitle:
    @pytest.mark.parametrize(
        ("root", "limit", "title"),
        [(Path("/p/proj"), 1, "tree proj/ -L 1"), (Path("/"), 3, "tree / -L 3")],
    )
    def test_title(self, root: Path, limit: int, title: str) -> None:
        assert view_title(root, limit) == title


class TestViewSize:
    def test_title_sets_minimum_width(self) -> None:
        assert view_size(_snapshot(["a"]), (200, 50), 2) == (len("tree proj/ -L 1"), 1)

    def test_longest_line_plus_padding(self) -> None:
        assert view_size(_snapshot(["x" * 30, "y"]), (200, 50), 10) == (40, 2)

    def test_bounded_by_editor(self) -> None:
        width, height = view_size(_snapshot(["x" * 300] + ["f"] * 99), (80, 24), 10)
        assert width == 80
        assert height == 24 - 1 - 2

    def test_empty_listing_keeps_one_row(self) -> None:
        assert view_size(_snapshot([]), (80, 24), 10)[1] == 1
