"""Turn resolved entries into indented display lines."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from treenvim.formatter.icons import IconProvider, require_icon_provider
from treenvim.resolver import ResolvedPath

INDENT_UNIT = "  "


def display_name(entry: ResolvedPath) -> str:
    """Basename with undecodable file-name bytes shown as U+FFFD."""
    return entry.name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


@dataclass(frozen=True, slots=True)
class FormattedLine:
    """Display text for one entry plus icon placement.

    Attributes:
        text: Indentation, optional icon and separator, then the basename.
        icon_offset: Byte offset of the glyph in ``text``; ``None`` without icons.
        icon_width: Byte length of the glyph (``0`` without icons).
        icon_highlight: Highlight group for the glyph, if any.
    """

    text: str
    icon_offset: int | None = None
    icon_width: int = 0
    icon_highlight: str | None = None


class LineFormatter:
    """Formats entries as ``<indent><glyph> <basename>`` or ``<indent><basename>``.

    Directories get no trailing separator in either mode, so the text
    always ends with the filesystem basename.
    """

    def __init__(self, icons: IconProvider | None = None, icons_enabled: bool = False) -> None:
        self._icons = require_icon_provider(icons, icons_enabled)

    @property
    def icons_enabled(self) -> bool:
        return self._icons is not None

    def format(self, entry: ResolvedPath) -> FormattedLine:
        return self.format_many([entry])[0]

    def format_many(self, entries: Sequence[ResolvedPath]) -> list[FormattedLine]:
        if self._icons is None:
            return [FormattedLine(text=INDENT_UNIT * e.depth + display_name(e)) for e in entries]

        icons = self._icons.lookup_many([(e.kind, e.path) for e in entries])
        lines: list[FormattedLine] = []
        for entry, icon in zip(entries, icons, strict=True):
            indent = INDENT_UNIT * entry.depth
            lines.append(
                FormattedLine(
                    text=f"{indent}{icon.glyph} {display_name(entry)}",
                    icon_offset=len(indent.encode("utf-8")),
                    icon_width=len(icon.glyph.encode("utf-8")),
                    icon_highlight=icon.highlight_group,
                )
            )
        return lines
