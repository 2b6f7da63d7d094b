"""Open tree views and keep track of the ones still open."""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterator
from pathlib import Path

from treenvim.actions import ActionDispatcher
from treenvim.config import TreeConfig
from treenvim.formatter.icons import IconProvider
from treenvim.formatter.line import LineFormatter
from treenvim.fsops import FileOperations
from treenvim.host import Host
from treenvim.incremental import ChunkedListing
from treenvim.lister import ListingProvider, make_provider
from treenvim.navigation import NavigationContext
from treenvim.render import BORDER_HEIGHT, view_size, view_title

logger = logging.getLogger(__name__)


def open_view(
    host: Host,
    config: TreeConfig,
    root: Path,
    origin_document: Path | None = None,
    icons: IconProvider | None = None,
    provider: ListingProvider | None = None,
    fs: FileOperations | None = None,
    on_close: Callable[[ActionDispatcher], None] | None = None,
) -> ActionDispatcher:
    """List ``root`` and show it on a new host surface.

    In synchronous mode the listing runs before any surface exists, so a
    failure leaves the editor untouched. In incremental mode the surface
    opens first and fills as chunks arrive.

    Raises:
        IconProviderUnavailable: If icons are enabled without ``icons``.
        ListingProviderFailure: If the synchronous first listing fails.
        MalformedEntry: If the synchronous first listing cannot be parsed.
    """
    formatter = LineFormatter(icons, config.icons_enabled)
    provider = provider or make_provider(config.provider, config.listing_options)
    title = view_title(root, config.limit)

    if not config.incremental:
        context = NavigationContext(provider, formatter, root, config.limit, origin_document)
        snapshot = context.open()
        assert snapshot is not None
        width, height = view_size(snapshot, host.editor_size(), config.width_padding)
        surface = host.open_surface(title, width, height)
        dispatcher = ActionDispatcher(context, host, surface, config, fs, on_close=on_close)
        host.bind_keys(surface, config.keymaps)
        dispatcher.redraw()
        return dispatcher

    def schedule_drain() -> None:
        # Called from the worker thread; drawing happens on the host's.
        host.schedule(dispatcher.drain_chunks)

    background = ChunkedListing(provider, config.chunk_size, schedule_drain)
    context = NavigationContext(provider, formatter, root, config.limit, origin_document, background)
    columns, lines = host.editor_size()
    surface = host.open_surface(
        title,
        min(len(title) + config.width_padding, columns),
        max(min(config.chunk_size, lines - 1 - BORDER_HEIGHT), 1),
    )
    dispatcher = ActionDispatcher(context, host, surface, config, fs, background, on_close)
    host.bind_keys(surface, config.keymaps)
    context.open()
    return dispatcher


class ViewRegistry:
    """Open views keyed by the identity of their host surface."""

    def __init__(self) -> None:
        self._views: dict[Hashable, ActionDispatcher] = {}

    def add(self, key: Hashable, dispatcher: ActionDispatcher) -> None:
        self._views[key] = dispatcher

    def get(self, key: Hashable) -> ActionDispatcher | None:
        return self._views.get(key)

    def remove(self, key: Hashable) -> ActionDispatcher | None:
        dispatcher = self._views.pop(key, None)
        if dispatcher is not None:
            logger.debug("Removed tree view %r", key)
        return dispatcher

    def __contains__(self, key: object) -> bool:
        return key in self._views

    def __len__(self) -> int:
        return len(self._views)

    def __iter__(self) -> Iterator[ActionDispatcher]:
        return iter(list(self._views.values()))
