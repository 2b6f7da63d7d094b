"""Tree view settings, read from ``g:tree_nvim`` or CLI flags."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Final

from treenvim import ConfigError
from treenvim.keymaps import Action, bind_keymaps
from treenvim.incremental import DEFAULT_CHUNK_SIZE
from treenvim.lister import PROVIDERS, ListingOptions

DEFAULT_KEYMAPS: Final[dict[str, str]] = {
    "<CR>": "select",
    "q": "close-tree",
    "<": "dec-limit",
    ">": "inc-limit",
    "h": "out-dir",
    "l": "in-dir",
    "y": "yank-rel-path",
    "Y": "yank-abs-path",
    "a": "create",
    "d": "delete",
    "r": "rename",
    "R": "refresh",
}


@dataclass(frozen=True)
class TreeConfig:
    """Validated tree view settings.

    Attributes:
        limit: Depth limit the view opens with.
        icons_enabled: Show ``mini.icons`` glyphs before names.
        provider: ``tree``, ``tree-json`` or ``scan``.
        respect_gitignore: Hide entries matched by .gitignore.
        exclude: Basename patterns to hide.
        close_on_select: Close the view after opening a file.
        incremental: List on a worker thread and draw in chunks.
        chunk_size: Entries per chunk in incremental mode.
        width_padding: Columns added to the longest line.
        keymaps: Key to action bindings for the tree buffer.
    """

    limit: int = 1
    icons_enabled: bool = True
    provider: str = "tree"
    respect_gitignore: bool = False
    exclude: tuple[str, ...] = ()
    close_on_select: bool = True
    incremental: bool = False
    chunk_size: int = DEFAULT_CHUNK_SIZE
    width_padding: int = 10
    keymaps: dict[str, Action] = field(default_factory=lambda: bind_keymaps(DEFAULT_KEYMAPS))

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ConfigError("limit must be greater than 0")
        if self.provider not in PROVIDERS:
            known = ", ".join(sorted(PROVIDERS))
            raise ConfigError(f"unknown provider '{self.provider}'. Known providers: {known}")
        if self.chunk_size < 1:
            raise ConfigError("chunk_size must be a positive integer")
        if self.width_padding < 0:
            raise ConfigError("width_padding must not be negative")

    @property
    def listing_options(self) -> ListingOptions:
        return ListingOptions(respect_gitignore=self.respect_gitignore, exclude=self.exclude)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> TreeConfig:
        """Build a config from a user-supplied dict.

        ``keymaps`` replaces the default bindings unless ``keymaps_merge``
        is true, in which case it is layered over them and a key mapped
        to ``""`` drops that default.

        Raises:
            ConfigError: On unknown keys, wrong types or unknown actions.
        """
        raw = dict(raw or {})
        known = {f.name for f in fields(cls)} | {"keymaps_merge"}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigError(f"unknown tree_nvim option(s): {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for name in ("limit", "chunk_size", "width_padding"):
            if name in raw:
                kwargs[name] = _expect(raw, name, int)
        for name in ("icons_enabled", "respect_gitignore", "close_on_select", "incremental"):
            if name in raw:
                kwargs[name] = _expect(raw, name, bool)
        if "provider" in raw:
            kwargs["provider"] = _expect(raw, "provider", str)
        if "exclude" in raw:
            patterns = _expect(raw, "exclude", list)
            if not all(isinstance(p, str) for p in patterns):
                raise ConfigError("exclude must be a list of strings")
            kwargs["exclude"] = tuple(patterns)
        if "keymaps" in raw:
            keymaps = dict(_expect(raw, "keymaps", dict))
            if raw.get("keymaps_merge", False):
                keymaps = {**DEFAULT_KEYMAPS, **keymaps}
            kwargs["keymaps"] = bind_keymaps({k: v for k, v in keymaps.items() if v})
        return cls(**kwargs)


def _expect(raw: Mapping[str, Any], name: str, expected: type) -> Any:
    value = raw[name]
    # Neovim hands booleans over as bools but Vimscript users write 0/1.
    if expected is bool and isinstance(value, int) and value in (0, 1):
        return bool(value)
    if expected is int and isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer")
    if not isinstance(value, expected):
        raise ConfigError(f"{name} must be of type {expected.__name__}, got {type(value).__name__}")
    return value
