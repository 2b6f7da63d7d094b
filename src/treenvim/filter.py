"""Entry filtering for the filesystem walk: ``-I`` patterns and .gitignore."""

from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path

from pathspec import GitIgnoreSpec

from treenvim.gitignore import find_gitignore_root, load_gitignore_spec


class PatternFilter:
    """Filter entries by fnmatch patterns on the basename.

    Mirrors ``tree -I PATTERN``.
    """

    def __init__(self, patterns: list[str] | None = None) -> None:
        self._patterns: list[str] = list(patterns) if patterns else []

    def should_exclude(self, path: Path, is_dir: bool) -> bool:
        return any(fnmatch(path.name, pat) for pat in self._patterns)


class GitignoreFilter:
    """Filter entries matched by the nearest .gitignore above the root."""

    def __init__(self, spec: GitIgnoreSpec, base: Path) -> None:
        self._spec = spec
        self._base = base

    @classmethod
    def for_root(cls, root: Path) -> GitignoreFilter | None:
        """Build a filter for ``root``, or ``None`` if no .gitignore applies."""
        base = find_gitignore_root(root)
        if base is None:
            return None
        spec = load_gitignore_spec(base)
        if spec is None:
            return None
        return cls(spec, base)

    def should_exclude(self, path: Path, is_dir: bool) -> bool:
        try:
            rel = path.relative_to(self._base).as_posix()
        except ValueError:
            return False
        if is_dir:
            rel += "/"
        return self._spec.match_file(rel)


class CombinedFilter:
    """Exclude an entry when any of the wrapped filters excludes it."""

    def __init__(self, *filters: PatternFilter | GitignoreFilter) -> None:
        self._filters = filters

    def should_exclude(self, path: Path, is_dir: bool) -> bool:
        return any(f.should_exclude(path, is_dir) for f in self._filters)
