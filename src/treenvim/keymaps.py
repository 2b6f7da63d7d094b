"""The closed set of tree view actions and keymap validation."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Final

from treenvim import ConfigError


class Action(enum.Enum):
    """Actions a tree buffer key can trigger."""

    CLOSE_TREE = "close-tree"
    SELECT = "select"
    OUT_DIR = "out-dir"
    IN_DIR = "in-dir"
    INC_LIMIT = "inc-limit"
    DEC_LIMIT = "dec-limit"
    YANK_ABS_PATH = "yank-abs-path"
    YANK_REL_PATH = "yank-rel-path"
    CREATE = "create"
    DELETE = "delete"
    RENAME = "rename"
    REFRESH = "refresh"


# Older configs name the depth limit a "level".
_ALIASES: Final[dict[str, Action]] = {
    "inc-level": Action.INC_LIMIT,
    "dec-level": Action.DEC_LIMIT,
}


def parse_action(name: str) -> Action:
    """Return the action called ``name``.

    Raises:
        ConfigError: If ``name`` is not a known action.
    """
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return Action(name)
    except ValueError:
        known = ", ".join(sorted([a.value for a in Action] + list(_ALIASES)))
        raise ConfigError(f"unknown action '{name}'. Known actions: {known}") from None


def bind_keymaps(keymaps: Mapping[str, str]) -> dict[str, Action]:
    """Validate every action name up front and return key → action.

    Raises:
        ConfigError: On the first unknown action name or non-string entry.
    """
    bound: dict[str, Action] = {}
    for key, name in keymaps.items():
        if not isinstance(key, str) or not isinstance(name, str):
            raise ConfigError(f"keymaps must map strings to action names, got {key!r}: {name!r}")
        bound[key] = parse_action(name)
    return bound
