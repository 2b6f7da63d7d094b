"""Icon lookup contract for the line formatter."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from treenvim import IconProviderUnavailable
from treenvim.resolver import Kind


@dataclass(frozen=True, slots=True)
class Icon:
    """Glyph and highlight group for one entry."""

    glyph: str
    highlight_group: str | None = None


class IconProvider(Protocol):
    """Looks up icons by entry kind and absolute path.

    ``lookup_many`` exists so remote providers can answer a whole chunk in
    one round trip; it must return one icon per request, in order.
    """

    def lookup(self, kind: Kind, path: Path) -> Icon: ...

    def lookup_many(self, requests: Sequence[tuple[Kind, Path]]) -> list[Icon]: ...


class StaticIconProvider:
    """Fixed glyph per kind; used by the CLI and tests."""

    def __init__(self, file_glyph: str = "-", directory_glyph: str = "+") -> None:
        self._glyphs = {
            Kind.FILE: Icon(file_glyph, "TreeFileIcon"),
            Kind.DIRECTORY: Icon(directory_glyph, "TreeDirectoryIcon"),
        }

    def lookup(self, kind: Kind, path: Path) -> Icon:
        return self._glyphs[kind]

    def lookup_many(self, requests: Sequence[tuple[Kind, Path]]) -> list[Icon]:
        return [self.lookup(kind, path) for kind, path in requests]


def require_icon_provider(provider: IconProvider | None, icons_enabled: bool) -> IconProvider | None:
    """Validate the icon provider against the icons setting.

    Returns:
        IconProvider | None: ``provider`` when icons are enabled, otherwise ``None``.

    Raises:
        IconProviderUnavailable: If icons are enabled and ``provider`` is ``None``.
    """
    if not icons_enabled:
        return None
    if provider is None:
        raise IconProviderUnavailable("`mini.icons` is required when `icons_enabled` is `true`")
    return provider
