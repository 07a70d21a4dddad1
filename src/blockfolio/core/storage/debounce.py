"""
Debounced document saves.

Rapid successive edits should not each hit the store. :class:`DebouncedSaver`
remembers the latest document and writes it once the edits pause for
``delay`` seconds. Only the most recent state matters, so intermediate
states are simply overwritten.

Scheduling uses the running asyncio loop (``call_later``). Outside a loop
(plain scripts, the CLI) there is nothing to defer to and saves write through
immediately.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from blockfolio.core.contracts.block import Block
from blockfolio.core.settings import get_logger
from blockfolio.core.storage.store import DocumentStore

logger = get_logger(__name__)


class DebouncedSaver:
    """Coalesce saves of one document key."""

    def __init__(self, store: DocumentStore, key: str, delay: float = 0.5) -> None:
        self.store = store
        self.key = key
        self.delay = delay
        self._pending: list[Block] | None = None
        self._handle: asyncio.TimerHandle | None = None
        self.writes = 0

    @property
    def has_pending(self) -> bool:
        """True while a scheduled save has not been written yet."""
        return self._pending is not None

    def schedule(self, blocks: Sequence[Block]) -> None:
        """Remember ``blocks`` and (re)start the debounce window."""
        self._pending = list(blocks)
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush()
            return
        self._handle = loop.call_later(self.delay, self.flush)

    def flush(self) -> bool:
        """Write the pending document now. Returns the store's result."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._pending is None:
            return True
        blocks, self._pending = self._pending, None
        self.writes += 1
        saved = self.store.save(self.key, blocks)
        if not saved:
            logger.warning("Debounced save of %r failed", self.key)
        return saved

    def cancel(self) -> None:
        """Drop the pending document without writing it."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = None


__all__ = ["DebouncedSaver"]
