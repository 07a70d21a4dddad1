"""
Project card: nested-document synchronization and direct field edits.

A project card owns a whole sub-document, stored encoded in its
``nestedContent`` prop. Opening the card creates a transient nested
:class:`~blockfolio.editor.surface.BlockEditor` from that string; while the
card is open the nested session is the source of truth and every change is
folded back into the parent block.

Sync cycle
----------
On each nested change notification:

1. If the reentrancy guard is set, skip.
2. Set the guard.
3. Encode the nested document, look up its first image, and write
   ``nestedContent`` plus ``coverImage`` (found URL, else the previous value)
   into the parent block.
4. Hand the guard release to the ``release`` scheduler.

The scheduler is the explicit acknowledgement that the write's own
notifications have been observed. Synchronous surfaces (``BlockEditor``)
deliver them during ``update_block``, so the default releases immediately.
Surfaces that notify on a later loop iteration should use
:func:`next_tick_release`; :func:`delayed_release` reproduces a fixed timer.

Title and subtext are not derived from the nested document. They are edited
through :class:`CardDetailsDraft` and written only on explicit confirm.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from blockfolio.core.blocks.codec import encode_document, initial_nested_content
from blockfolio.core.blocks.search import find_first_image
from blockfolio.core.contracts.block import (
    DEFAULT_CARD_SUBTEXT,
    DEFAULT_CARD_TITLE,
    Block,
    BlockType,
)
from blockfolio.core.settings import get_logger
from blockfolio.editor.surface import BlockEditor, EditingSurface, Unsubscribe

logger = get_logger(__name__)

Release = Callable[[Callable[[], None]], None]


def release_immediately(callback: Callable[[], None]) -> None:
    """Run the guard release right away."""
    callback()


def next_tick_release() -> Release:
    """Release on the next iteration of the running asyncio loop."""

    def schedule(callback: Callable[[], None]) -> None:
        asyncio.get_running_loop().call_soon(callback)

    return schedule


def delayed_release(seconds: float) -> Release:
    """Release after a fixed delay on the running asyncio loop."""

    def schedule(callback: Callable[[], None]) -> None:
        asyncio.get_running_loop().call_later(seconds, callback)

    return schedule


class CardState(StrEnum):
    """Lifecycle of a card's nested session."""

    CLOSED = "closed"
    OPEN = "open"


class ProjectCardController:
    """Keep one card's ``nestedContent``/``coverImage`` in step with its nested session.

    Parameters
    ----------
    editor:
        The parent editing surface owning the card block.
    block_id:
        Id of the project card block.
    release:
        Scheduler for clearing the reentrancy guard (see module docs).
    nested_factory:
        Builds the nested session from the decoded blocks.
    """

    def __init__(
        self,
        editor: EditingSurface,
        block_id: str,
        *,
        release: Release = release_immediately,
        nested_factory: Callable[[list[Block]], BlockEditor] = BlockEditor,
    ) -> None:
        self.editor = editor
        self.block_id = block_id
        self._release = release
        self._nested_factory = nested_factory
        self._nested: BlockEditor | None = None
        self._unsubscribe: Unsubscribe | None = None
        self._syncing = False
        self.sync_count = 0

    # ------------------------------- State ----------------------------------

    @property
    def state(self) -> CardState:
        return CardState.OPEN if self._nested is not None else CardState.CLOSED

    @property
    def nested(self) -> BlockEditor | None:
        """The live nested session while open."""
        return self._nested

    @property
    def is_syncing(self) -> bool:
        """True while the reentrancy guard is held."""
        return self._syncing

    def card(self) -> Block:
        """Current state of the card block in the parent document."""
        block = _find_block(self.editor.document, self.block_id)
        if block is None:
            raise KeyError(f"project card {self.block_id!r} not found")
        if block.kind is not BlockType.PROJECT_CARD:
            raise ValueError(f"block {self.block_id!r} is a {block.type!r}, not a project card")
        return block

    # ------------------------------- Transitions ----------------------------

    def open(self) -> BlockEditor:
        """Open the nested session (idempotent while already open)."""
        if self._nested is not None:
            return self._nested
        blocks = initial_nested_content(self.card().props)
        self._nested = self._nested_factory(blocks)
        self._unsubscribe = self._nested.on_change(self._on_nested_change)
        logger.debug("Opened nested session for card %s (%d blocks)", self.block_id, len(blocks))
        return self._nested

    def close(self) -> None:
        """Discard the nested session; the last synced state stays persisted."""
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._nested = None
        logger.debug("Closed nested session for card %s", self.block_id)

    # ------------------------------- Sync -----------------------------------

    def _on_nested_change(self, _source: Any = None) -> None:
        if self._syncing:
            logger.debug("Skipping re-entrant sync for card %s", self.block_id)
            return
        self._syncing = True
        try:
            self.sync()
        except Exception:
            logger.exception("Failed to sync nested content of card %s", self.block_id)
        finally:
            self._schedule_release()

    def _schedule_release(self) -> None:
        try:
            self._release(self._clear_guard)
        except Exception:
            logger.exception("Guard release failed for card %s; releasing now", self.block_id)
            self._clear_guard()

    def _clear_guard(self) -> None:
        self._syncing = False

    def sync(self) -> None:
        """Fold the nested document into the parent card's props."""
        if self._nested is None:
            return
        document = self._nested.document
        cover = find_first_image(document)
        previous = self.card().prop("coverImage")
        self.editor.update_block(
            self.block_id,
            props={
                "nestedContent": encode_document(document),
                "coverImage": cover or (previous if isinstance(previous, str) else ""),
            },
        )
        self.sync_count += 1

    # ------------------------------- Direct edits ---------------------------

    def draft(self) -> CardDetailsDraft:
        """Start a title/subtext edit seeded from the current props."""
        return CardDetailsDraft.start(self.editor, self.block_id)


@dataclass
class CardDetailsDraft:
    """Local edit state for a card's title and subtext."""

    editor: EditingSurface
    block_id: str
    title: str
    subtext: str

    @classmethod
    def start(cls, editor: EditingSurface, block_id: str) -> CardDetailsDraft:
        draft = cls(editor=editor, block_id=block_id, title="", subtext="")
        draft.cancel()
        return draft

    def confirm(self) -> Block:
        """Write title and subtext; empty values fall back to the defaults."""
        return self.editor.update_block(
            self.block_id,
            props={
                "title": self.title or DEFAULT_CARD_TITLE,
                "subtext": self.subtext or DEFAULT_CARD_SUBTEXT,
            },
        )

    def confirm_title(self) -> Block:
        """Write only the title (the modal header edit)."""
        return self.editor.update_block(
            self.block_id, props={"title": self.title or DEFAULT_CARD_TITLE}
        )

    def cancel(self) -> None:
        """Revert the draft to the block's current values without writing."""
        block = _find_block(self.editor.document, self.block_id)
        if block is None:
            raise KeyError(f"project card {self.block_id!r} not found")
        title = block.prop("title")
        subtext = block.prop("subtext")
        self.title = title if isinstance(title, str) else DEFAULT_CARD_TITLE
        self.subtext = subtext if isinstance(subtext, str) else DEFAULT_CARD_SUBTEXT


def _find_block(blocks: list[Block], block_id: str) -> Block | None:
    for block in blocks:
        if block.id == block_id:
            return block
        found = _find_block(block.children, block_id)
        if found is not None:
            return found
    return None


__all__ = [
    "CardDetailsDraft",
    "CardState",
    "ProjectCardController",
    "Release",
    "delayed_release",
    "next_tick_release",
    "release_immediately",
]
