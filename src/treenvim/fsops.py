"""Create, delete and rename paths for the tree view's mutation actions."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from treenvim import FilesystemMutationFailure

logger = logging.getLogger(__name__)


def resolve_target(name: str, base: Path) -> Path:
    """Interpret user input relative to ``base`` unless it is absolute."""
    target = Path(os.path.expanduser(name))
    if not target.is_absolute():
        target = base / target
    return Path(os.path.normpath(target))


class FileOperations:
    """Filesystem mutations; every failure is a :class:`FilesystemMutationFailure`."""

    def create_path(self, target: Path, directory: bool = False) -> None:
        """Create an empty file, or a directory, including missing parents.

        Raises:
            FilesystemMutationFailure: If ``target`` exists or cannot be created.
        """
        if target.exists() or target.is_symlink():
            raise FilesystemMutationFailure(f"'{target}' already exists")
        try:
            if directory:
                target.mkdir(parents=True, exist_ok=False)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                with open(target, "x"):
                    pass
        except OSError as exc:
            raise FilesystemMutationFailure(f"cannot create '{target}': {exc}") from exc
        logger.debug("Created %s", target)

    def delete_path(self, target: Path, recursive: bool = False) -> None:
        """Remove a file, link or directory.

        Raises:
            FilesystemMutationFailure: If ``target`` is a non-empty directory
                and ``recursive`` is false, or removal fails.
        """
        try:
            if target.is_dir() and not target.is_symlink():
                if recursive:
                    shutil.rmtree(target)
                else:
                    target.rmdir()
            else:
                target.unlink()
        except OSError as exc:
            raise FilesystemMutationFailure(f"cannot delete '{target}': {exc}") from exc
        logger.debug("Deleted %s", target)

    def rename_path(self, source: Path, target: Path) -> None:
        """Move ``source`` to ``target`` without overwriting.

        Raises:
            FilesystemMutationFailure: If ``target`` exists or the move fails.
        """
        if target.exists() or target.is_symlink():
            raise FilesystemMutationFailure(f"'{target}' already exists")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            source.rename(target)
        except OSError as exc:
            raise FilesystemMutationFailure(f"cannot rename '{source}' to '{target}': {exc}") from exc
        logger.debug("Renamed %s -> %s", source, target)
