"""Shared fixtures and fake collaborators for treenvim tests."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from treenvim import ListingProviderFailure
from treenvim.host import NotifyLevel
from treenvim.formatter.icons import Icon
from treenvim.keymaps import Action
from treenvim.resolver import Kind, ResolvedPath


@pytest.fixture
def scenario_tree(tmp_path: Path) -> Path:
    """Small tree used by the navigation scenarios.

    Structure::

        root/
        ├── a.txt
        ├── b.txt
        └── sub/
            └── c.txt
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "a.txt").write_text("a")
    (root / "b.txt").write_text("b")
    (root / "sub").mkdir()
    (root / "sub" / "c.txt").write_text("c")
    return root


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Deeper tree with a hidden directory.

    Structure::

        root/
        ├── .config/
        │   └── settings.toml
        ├── docs/
        │   └── guide.md
        ├── src/
        │   ├── api/
        │   │   ├── auth.py
        │   │   └── user.py
        │   └── models/
        │       └── user.py
        └── README.md
    """
    (tmp_path / ".config").mkdir()
    (tmp_path / ".config" / "settings.toml").write_text("x = 1")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("guide")
    (tmp_path / "src" / "api").mkdir(parents=True)
    (tmp_path / "src" / "api" / "auth.py").write_text("auth")
    (tmp_path / "src" / "api" / "user.py").write_text("user")
    (tmp_path / "src" / "models").mkdir()
    (tmp_path / "src" / "models" / "user.py").write_text("user")
    (tmp_path / "README.md").write_text("readme")
    return tmp_path


@pytest.fixture
def fake_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[..., Path]:
    """Install a fake ``tree`` executable on PATH.

    Returns a function ``install(stdout, exit_code=0, stderr="")`` that
    (re)writes the script and returns the file holding its last argv.
    """
    if os.name == "nt":
        pytest.skip("shell script executables are POSIX only")
    bin_dir = tmp_path / "fake-bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")

    def install(stdout: str, exit_code: int = 0, stderr: str = "") -> Path:
        (bin_dir / "stdout.txt").write_text(stdout)
        (bin_dir / "stderr.txt").write_text(stderr)
        argv_file = bin_dir / "argv.txt"
        script = bin_dir / "tree"
        script.write_text(
            "#!/bin/sh\n"
            f'printf "%s\\n" "$@" > "{argv_file}"\n'
            f'cat "{bin_dir / "stdout.txt"}"\n'
            f'cat "{bin_dir / "stderr.txt"}" >&2\n'
            f"exit {exit_code}\n"
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return argv_file

    return install


class ScriptedProvider:
    """Listing provider that delegates to a real one and records calls.

    Set ``fail_next`` to make the next call raise ``ListingProviderFailure``,
    or ``crash_next`` to make it raise an unrelated ``RuntimeError``.
    """

    def __init__(self, inner: object) -> None:
        self._inner = inner
        self.calls: list[tuple[Path, int]] = []
        self.fail_next = False
        self.crash_next = False

    def iter_entries(self, root: Path, depth_limit: int) -> Iterator[ResolvedPath]:
        self.calls.append((root, depth_limit))
        if self.fail_next:
            self.fail_next = False
            raise ListingProviderFailure("`tree` exit code was 2")
        if self.crash_next:
            self.crash_next = False
            raise RuntimeError("provider crashed")
        yield from self._inner.iter_entries(root, depth_limit)  # type: ignore[attr-defined]


class BrokenIconProvider:
    """Icon provider whose lookups fail the way a dropped RPC channel does."""

    def lookup(self, kind: Kind, path: Path) -> Icon:
        raise RuntimeError("icon lookup failed")

    def lookup_many(self, requests: Sequence[tuple[Kind, Path]]) -> list[Icon]:
        raise RuntimeError("icon lookup failed")


@dataclass
class FakeSurface:
    key: int
    title: str
    width: int
    height: int


@dataclass
class RecordingHost:
    """In-memory Host: keeps the buffer lines, cursor and every side effect."""

    columns: int = 120
    lines_available: int = 40
    cwd_path: Path = Path("/")
    document: Path | None = None
    prompt_answers: list[str] = field(default_factory=list)
    confirm_answer: bool = True
    lines: list[str] = field(default_factory=list)
    cursor: int = 1
    highlights: list[tuple[int, int, int, str]] = field(default_factory=list)
    marks: dict[str, int] = field(default_factory=dict)
    notifications: list[tuple[str, NotifyLevel]] = field(default_factory=list)
    opened_files: list[Path] = field(default_factory=list)
    clipboard: list[str] = field(default_factory=list)
    keymaps: dict[str, Action] = field(default_factory=dict)
    closed: list[FakeSurface] = field(default_factory=list)
    surfaces: list[FakeSurface] = field(default_factory=list)
    scheduled: list[Callable[[], None]] = field(default_factory=list)

    def open_surface(self, title: str, width: int, height: int) -> FakeSurface:
        surface = FakeSurface(key=len(self.surfaces) + 1, title=title, width=width, height=height)
        self.surfaces.append(surface)
        return surface

    def bind_keys(self, surface: FakeSurface, keymaps: Mapping[str, Action]) -> None:
        self.keymaps.update(keymaps)

    def set_lines(self, surface: FakeSurface, start: int, lines: Sequence[str]) -> None:
        self.lines = self.lines[:start] + list(lines)

    def highlight(self, surface: FakeSurface, row: int, start_col: int, end_col: int, group: str) -> None:
        self.highlights.append((row, start_col, end_col, group))

    def clear_highlights(self, surface: FakeSurface) -> None:
        self.highlights.clear()

    def set_cursor(self, surface: FakeSurface, line: int) -> None:
        self.cursor = line

    def get_cursor(self, surface: FakeSurface) -> int:
        return self.cursor

    def set_mark(self, surface: FakeSurface, name: str, line: int) -> None:
        self.marks[name] = line

    def resize(self, surface: FakeSurface, width: int, height: int, title: str) -> None:
        surface.width, surface.height, surface.title = width, height, title

    def close_surface(self, surface: FakeSurface) -> None:
        self.closed.append(surface)

    def editor_size(self) -> tuple[int, int]:
        return self.columns, self.lines_available

    def open_file(self, surface: FakeSurface, path: Path) -> None:
        self.opened_files.append(path)

    def notify(self, message: str, level: NotifyLevel = NotifyLevel.INFO) -> None:
        self.notifications.append((message, level))

    def write_clipboard(self, text: str) -> None:
        self.clipboard.append(text)

    def prompt(self, message: str, default: str = "") -> str:
        return self.prompt_answers.pop(0) if self.prompt_answers else ""

    def confirm(self, message: str) -> bool:
        return self.confirm_answer

    def cwd(self) -> Path:
        return self.cwd_path

    def current_document(self) -> Path | None:
        return self.document

    def schedule(self, callback: Callable[[], None]) -> None:
        self.scheduled.append(callback)

    def run_scheduled(self) -> None:
        while self.scheduled:
            self.scheduled.pop(0)()

    def cursor_text(self) -> str:
        return self.lines[self.cursor - 1]


@pytest.fixture
def host(tmp_path: Path) -> RecordingHost:
    return RecordingHost(cwd_path=tmp_path)
