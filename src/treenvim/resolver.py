"""Map raw listing tokens (``tree`` text lines or JSON nodes) to paths."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from treenvim import MalformedEntry

# Characters ``tree --charset=ascii`` draws before the path component.
_TREE_DRAWING_CHARS = frozenset("|`- \\")

# Width of one nesting level in ``tree`` output ("|-- ", "|   ", "`-- ").
_TREE_LEVEL_WIDTH = 4

_SYMLINK_ARROW = " -> "


class Kind(enum.Enum):
    """Filesystem node classification."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    """A listing token resolved against the listing root.

    Attributes:
        path: Normalized absolute path.
        kind: File or directory.
        depth: Nesting level; direct children of the root have depth 0.
    """

    path: Path
    kind: Kind
    depth: int

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_dir(self) -> bool:
        return self.kind is Kind.DIRECTORY


def join_normalized(root: Path, rel_path: str) -> Path:
    """Join ``rel_path`` onto ``root`` and collapse ``.``/``..`` segments.

    Symlinks are not resolved.
    """
    return Path(os.path.normpath(os.path.join(root, rel_path)))


def classify(path: Path) -> Kind:
    """Stat ``path`` following symlinks; anything that cannot be stat'ed is a file."""
    try:
        return Kind.DIRECTORY if path.is_dir() else Kind.FILE
    except OSError:
        return Kind.FILE


def _strip_symlink_target(root: Path, rel_path: str) -> str:
    if _SYMLINK_ARROW not in rel_path:
        return rel_path
    link_part = rel_path.split(_SYMLINK_ARROW, 1)[0]
    if os.path.islink(os.path.join(root, link_part)):
        return link_part
    return rel_path


def resolve_line(line: str, root: Path) -> ResolvedPath | None:
    """Resolve one line of ``tree -f -a --charset=ascii`` output.

    The path component starts at the first ``.`` (``tree -f`` prefixes
    every path with ``./``); everything before it must be tree-drawing
    characters, whose width encodes the nesting level.

    Args:
        line: One non-empty output line.
        root: Directory ``tree`` was run in.

    Returns:
        ResolvedPath | None: The resolved entry, or ``None`` for the
        root line (``.``) itself.

    Raises:
        MalformedEntry: If the line has no ``.`` marker or the prefix
            contains anything other than drawing characters.
    """
    marker = line.find(".")
    if marker < 0:
        raise MalformedEntry(f"expected a path starting with '.' in tree output line: {line!r}")
    prefix = line[:marker]
    if not set(prefix) <= _TREE_DRAWING_CHARS:
        raise MalformedEntry(f"unexpected characters before path in tree output line: {line!r}")

    if not prefix:
        # Root line.
        return None

    rel_path = _strip_symlink_target(root, line[marker:])
    path = join_normalized(root, rel_path)
    depth = len(prefix) // _TREE_LEVEL_WIDTH - 1
    return ResolvedPath(path=path, kind=classify(path), depth=max(depth, 0))


def resolve_node(node: Any, root: Path, depth: int) -> ResolvedPath:
    """Resolve one node of ``tree -J -f`` output.

    Args:
        node: Decoded JSON object with ``type`` and ``name`` keys.
        root: Directory ``tree`` was run in.
        depth: Nesting level of the node.

    Returns:
        ResolvedPath: Resolved entry. ``directory`` nodes are directories,
        ``link`` nodes are classified by what they point to, and sockets,
        fifos and the rest are files.

    Raises:
        MalformedEntry: If the node is not an object with a string name.
    """
    if not isinstance(node, dict):
        raise MalformedEntry(f"expected a JSON object in tree output, got {type(node).__name__}")
    name = node.get("name")
    node_type = node.get("type")
    if not isinstance(name, str) or not name:
        raise MalformedEntry(f"tree JSON node without a name: {node!r}")
    if not isinstance(node_type, str):
        raise MalformedEntry(f"tree JSON node without a type: {node!r}")

    path = join_normalized(root, name)
    if node_type == "directory":
        kind = Kind.DIRECTORY
    elif node_type == "link":
        kind = classify(path)
    else:
        kind = Kind.FILE
    return ResolvedPath(path=path, kind=kind, depth=depth)
