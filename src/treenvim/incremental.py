"""Background listing that hands chunks of entries to the editor thread."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

from treenvim import ListingProviderFailure, TreeNvimError
from treenvim.lister import ListingProvider
from treenvim.resolver import ResolvedPath

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 200


@dataclass(frozen=True)
class ListingChunk:
    """One batch of entries from a background listing.

    Attributes:
        generation: Generation token of the listing that produced it.
        entries: Entries in provider order, continuing the previous chunk.
        done: Whether this is the final chunk.
        error: Failure that ended the listing; only set when ``done``.
    """

    generation: int
    entries: tuple[ResolvedPath, ...] = ()
    done: bool = False
    error: TreeNvimError | None = None


class ChunkedListing:
    """Runs one provider per request on a worker thread.

    Chunks go into a queue in production order; ``notify`` is called from
    the worker after each put so the host can schedule :meth:`drain` on
    its own thread. Nothing here touches view state.

    Starting a new listing cancels the previous one; a cancelled worker
    stops at the next entry and closes its provider, which ends any
    ``tree`` process it runs.
    """

    def __init__(
        self,
        provider: ListingProvider,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        notify: Callable[[], None] | None = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be a positive integer")
        self._provider = provider
        self._chunk_size = chunk_size
        self._notify = notify
        self._results: Queue[ListingChunk] = Queue()
        self._worker: threading.Thread | None = None
        self._cancelled = threading.Event()

    def start(self, root: Path, depth_limit: int, generation: int) -> threading.Thread:
        self.cancel()
        cancelled = threading.Event()
        self._cancelled = cancelled
        worker = threading.Thread(
            target=self._run,
            args=(root, depth_limit, generation, cancelled),
            name=f"treenvim-listing-{generation}",
            daemon=True,
        )
        self._worker = worker
        worker.start()
        return worker

    def cancel(self) -> None:
        """Ask the running worker, if any, to stop without posting more chunks."""
        self._cancelled.set()

    def _put(self, chunk: ListingChunk) -> None:
        self._results.put(chunk)
        if self._notify is not None:
            self._notify()

    def _run(self, root: Path, depth_limit: int, generation: int, cancelled: threading.Event) -> None:
        batch: list[ResolvedPath] = []
        entries: Iterator[ResolvedPath] = iter(())
        try:
            entries = self._provider.iter_entries(root, depth_limit)
            for entry in entries:
                if cancelled.is_set():
                    logger.debug("Background listing %d cancelled", generation)
                    return
                batch.append(entry)
                if len(batch) >= self._chunk_size:
                    self._put(ListingChunk(generation, tuple(batch)))
                    batch = []
        except TreeNvimError as exc:
            logger.debug("Background listing %d failed: %s", generation, exc)
            self._put(ListingChunk(generation, done=True, error=exc))
            return
        except Exception as exc:
            logger.exception("Background listing %d crashed", generation)
            failure = ListingProviderFailure(f"listing {root} failed: {exc}")
            failure.__cause__ = exc
            self._put(ListingChunk(generation, done=True, error=failure))
            return
        finally:
            if isinstance(entries, Generator):
                entries.close()
        if cancelled.is_set():
            return
        self._put(ListingChunk(generation, tuple(batch), done=True))

    def join(self, timeout: float | None = None) -> None:
        if self._worker is not None:
            self._worker.join(timeout)

    def drain(self) -> list[ListingChunk]:
        """Return every chunk produced so far, oldest first."""
        out: list[ListingChunk] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out
