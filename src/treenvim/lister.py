"""Listing providers: run ``tree`` (text or JSON) or walk the filesystem.

Every provider yields :class:`~treenvim.resolver.ResolvedPath` values in
pre-order, bounded by a depth limit, with hidden entries included.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from treenvim import ListingProviderFailure, MalformedEntry
from treenvim.filter import CombinedFilter, GitignoreFilter, PatternFilter
from treenvim.resolver import ResolvedPath, resolve_line, resolve_node
from treenvim.scanner import ScanOptions, walk

logger = logging.getLogger(__name__)

TREE_EXECUTABLE = "tree"


@dataclass(frozen=True, slots=True)
class ListingOptions:
    """Provider settings shared by every strategy.

    Attributes:
        respect_gitignore: Skip entries matched by .gitignore.
        exclude: fnmatch patterns excluded by basename (``tree -I``).
    """

    respect_gitignore: bool = False
    exclude: tuple[str, ...] = field(default_factory=tuple)


class ListingProvider(Protocol):
    """Enumerates a directory tree below a root, up to a depth limit."""

    def iter_entries(self, root: Path, depth_limit: int) -> Iterator[ResolvedPath]: ...


def _tree_args(depth_limit: int, options: ListingOptions, *extra: str) -> list[str]:
    args = [
        TREE_EXECUTABLE,
        "-f",
        "-a",
        "--noreport",
        "--charset=ascii",
        "-L",
        str(depth_limit),
        *extra,
    ]
    if options.respect_gitignore:
        args.append("--gitignore")
    for pattern in options.exclude:
        args.extend(["-I", pattern])
    return args


def _run_tree(args: Sequence[str], cwd: Path) -> str:
    """Run ``tree`` to completion and return its stdout.

    Raises:
        ListingProviderFailure: If ``tree`` is missing, exits non-zero or
            prints nothing.
    """
    logger.debug("Running %s in %s", " ".join(args), cwd)
    try:
        proc = subprocess.run(
            list(args),
            cwd=cwd,
            capture_output=True,
            text=True,
            errors="surrogateescape",
            check=False,
        )
    except OSError as exc:
        raise ListingProviderFailure(f"cannot run `{TREE_EXECUTABLE}`: {exc}") from exc

    if proc.returncode != 0:
        detail = proc.stderr.strip()
        raise ListingProviderFailure(
            f"`{TREE_EXECUTABLE}` exit code was {proc.returncode}" + (f": {detail}" if detail else "")
        )
    if not proc.stdout:
        raise ListingProviderFailure(f"no stdout from `{TREE_EXECUTABLE}`")
    return proc.stdout


class TreeTextProvider:
    """Streams ``tree -f -a --charset=ascii`` output one line at a time."""

    def __init__(self, options: ListingOptions | None = None) -> None:
        self._options = options or ListingOptions()

    def iter_entries(self, root: Path, depth_limit: int) -> Iterator[ResolvedPath]:
        args = _tree_args(depth_limit, self._options)
        logger.debug("Streaming %s in %s", " ".join(args), root)
        try:
            proc = subprocess.Popen(
                args,
                cwd=root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                # Undecodable bytes in file names map to surrogates, as os.fsdecode does.
                errors="surrogateescape",
            )
        except OSError as exc:
            raise ListingProviderFailure(f"cannot run `{TREE_EXECUTABLE}`: {exc}") from exc

        saw_output = False
        with proc:
            assert proc.stdout is not None
            try:
                for raw_line in proc.stdout:
                    line = raw_line.rstrip("\n")
                    if not line:
                        continue
                    saw_output = True
                    resolved = resolve_line(line, root)
                    if resolved is not None:
                        yield resolved
            except BaseException:
                # Parse failure or the consumer closed us early.
                proc.kill()
                raise
            stderr = proc.stderr.read() if proc.stderr is not None else ""

        if proc.returncode != 0:
            detail = stderr.strip()
            raise ListingProviderFailure(
                f"`{TREE_EXECUTABLE}` exit code was {proc.returncode}" + (f": {detail}" if detail else "")
            )
        if not saw_output:
            raise ListingProviderFailure(f"no stdout from `{TREE_EXECUTABLE}`")


class TreeJsonProvider:
    """Runs ``tree -J -f -a`` and walks the nested document depth-first."""

    def __init__(self, options: ListingOptions | None = None) -> None:
        self._options = options or ListingOptions()

    def iter_entries(self, root: Path, depth_limit: int) -> Iterator[ResolvedPath]:
        stdout = _run_tree(_tree_args(depth_limit, self._options, "-J"), root)
        try:
            document = json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise MalformedEntry(f"`{TREE_EXECUTABLE} -J` printed invalid JSON: {exc}") from exc

        if not isinstance(document, list) or not document:
            raise MalformedEntry(f"`{TREE_EXECUTABLE} -J` output is not a non-empty JSON array")
        top = document[0]
        if not isinstance(top, dict) or top.get("type") != "directory":
            raise MalformedEntry(f"`{TREE_EXECUTABLE} -J` output does not start with a directory node")

        # Explicit stack of (node, depth); root's contents are depth 0.
        stack: list[tuple[Any, int]] = [(child, 0) for child in reversed(_contents(top))]
        while stack:
            node, depth = stack.pop()
            resolved = resolve_node(node, root, depth)
            yield resolved
            if resolved.is_dir:
                stack.extend((child, depth + 1) for child in reversed(_contents(node)))


def _contents(node: dict[str, Any]) -> list[Any]:
    contents = node.get("contents", [])
    if not isinstance(contents, list):
        raise MalformedEntry(f"tree JSON node has non-array contents: {node.get('name')!r}")
    # ``tree -J`` reports unreadable directories as {"error": ...} children.
    return [child for child in contents if not (isinstance(child, dict) and "error" in child)]


class ScanProvider:
    """Walks the filesystem in-process; no external ``tree`` needed."""

    def __init__(self, options: ListingOptions | None = None) -> None:
        self._options = options or ListingOptions()

    def iter_entries(self, root: Path, depth_limit: int) -> Iterator[ResolvedPath]:
        if not root.is_dir():
            raise ListingProviderFailure(f"'{root}' is not a directory")

        filters: list[PatternFilter | GitignoreFilter] = []
        if self._options.exclude:
            filters.append(PatternFilter(list(self._options.exclude)))
        if self._options.respect_gitignore:
            gitignore_filter = GitignoreFilter.for_root(root)
            if gitignore_filter is not None:
                filters.append(gitignore_filter)

        logger.debug("Walking %s to depth %d", root, depth_limit)
        yield from walk(
            root,
            ScanOptions(depth_limit=depth_limit, all_files=True),
            CombinedFilter(*filters) if filters else None,
        )


PROVIDERS: dict[str, type[TreeTextProvider] | type[TreeJsonProvider] | type[ScanProvider]] = {
    "tree": TreeTextProvider,
    "tree-json": TreeJsonProvider,
    "scan": ScanProvider,
}


def make_provider(name: str, options: ListingOptions | None = None) -> ListingProvider:
    """Instantiate the provider registered under ``name``.

    Raises:
        KeyError: If ``name`` is not a known provider.
    """
    return PROVIDERS[name](options)


def list_entries(provider: ListingProvider, root: Path, depth_limit: int) -> list[ResolvedPath]:
    """Run ``provider`` to completion.

    Raises:
        ListingProviderFailure: Propagated from the provider.
        MalformedEntry: Propagated from the provider.
    """
    entries = list(provider.iter_entries(root, depth_limit))
    logger.debug("Listed %d entries under %s (depth %d)", len(entries), root, depth_limit)
    return entries
