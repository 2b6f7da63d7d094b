"""Dependency checks reported by ``:TreeHealth``."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass

from treenvim.lister import TREE_EXECUTABLE


@dataclass(frozen=True, slots=True)
class HealthItem:
    ok: bool
    message: str
    advice: str | None = None


def check_health(
    provider: str = "tree",
    icons_enabled: bool = False,
    icons_loadable: Callable[[], bool] | None = None,
) -> list[HealthItem]:
    """Check the listing provider and, when icons are on, ``mini.icons``.

    Args:
        provider: Configured provider name; ``scan`` needs no executable.
        icons_enabled: Whether icons are configured.
        icons_loadable: Reports whether the icon module can be loaded.
    """
    items: list[HealthItem] = []
    if shutil.which(TREE_EXECUTABLE) is not None:
        items.append(HealthItem(True, f"{TREE_EXECUTABLE} is installed"))
    elif provider == "scan":
        items.append(HealthItem(True, f"{TREE_EXECUTABLE} is not installed (not needed by the scan provider)"))
    else:
        items.append(
            HealthItem(
                False,
                f"{TREE_EXECUTABLE} is not installed",
                "Install tree: https://en.wikipedia.org/wiki/Tree_(command)",
            )
        )

    if icons_enabled:
        if icons_loadable is not None and icons_loadable():
            items.append(HealthItem(True, "mini.icons is available"))
        else:
            items.append(
                HealthItem(False, "mini.icons is not available", "Install mini.icons or set icons_enabled = false")
            )
    return items
