"""
Editing surface: the live, mutable document.

The interactive editor is an external collaborator. The core only relies on
the narrow :class:`EditingSurface` protocol:

- ``document``: the current block sequence (read),
- ``update_block(ref, props=...)``: merge a partial property bag into a block,
- ``on_change(handler)``: subscribe to change notifications; returns an
  unsubscribe callable.

:class:`BlockEditor` is the in-process implementation used by the CLI, the
HTTP API, the project-card synchronizer (one per open nested session), and
tests. Notifications are delivered synchronously, one at a time, to a
snapshot of the current subscribers.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, Literal, Protocol

from blockfolio.core.blocks.sanitizer import sanitize
from blockfolio.core.contracts.block import Block, default_document
from blockfolio.core.settings import get_logger
from blockfolio.core.storage.debounce import DebouncedSaver

logger = get_logger(__name__)

ChangeHandler = Callable[["BlockEditor"], None]
Unsubscribe = Callable[[], None]
BlockRef = Block | str


class EditingSurface(Protocol):
    """What the core needs from an editing surface."""

    @property
    def document(self) -> list[Block]: ...

    def update_block(self, block_ref: BlockRef, *, props: Mapping[str, Any]) -> Block: ...

    def on_change(self, handler: ChangeHandler) -> Unsubscribe: ...


def _ref_id(block_ref: BlockRef) -> str:
    block_id = block_ref.id if isinstance(block_ref, Block) else block_ref
    if not block_id:
        raise KeyError("block reference has no id")
    return block_id


class BlockEditor:
    """In-memory editing surface over sanitized blocks.

    Parameters
    ----------
    initial_content:
        Any value :func:`sanitize` accepts. ``None`` (or content that
        sanitizes to nothing) starts from :func:`default_document`.
    """

    def __init__(self, initial_content: Any = None) -> None:
        blocks = sanitize(initial_content) if initial_content is not None else []
        self._blocks: list[Block] = blocks or default_document()
        self._handlers: list[ChangeHandler] = []
        for block in self._walk(self._blocks):
            self._ensure_id(block)

    # ------------------------------- Read API -------------------------------

    @property
    def document(self) -> list[Block]:
        """Deep copy of the current top-level blocks."""
        return [block.model_copy(deep=True) for block in self._blocks]

    def get_block(self, block_ref: BlockRef) -> Block | None:
        """Find a block by id anywhere in the tree (copy), or ``None``."""
        found = self._find(_ref_id(block_ref))
        return found.model_copy(deep=True) if found is not None else None

    # ------------------------------- Write API ------------------------------

    def update_block(self, block_ref: BlockRef, *, props: Mapping[str, Any]) -> Block:
        """Merge ``props`` into the referenced block and notify subscribers.

        Non-primitive values are dropped, as the property bag only holds
        primitives.

        Raises
        ------
        KeyError
            If no block with that id exists.
        """
        block_id = _ref_id(block_ref)
        target = self._find(block_id)
        if target is None:
            raise KeyError(f"block {block_id!r} not found")

        cleaned = sanitize([{"type": target.type, "props": dict(props)}])
        merged = {**target.props, **(cleaned[0].props if cleaned else {})}
        target.props = merged
        self._notify()
        return target.model_copy(deep=True)

    def insert_blocks(
        self,
        blocks: Iterable[Any],
        reference: BlockRef | None = None,
        placement: Literal["before", "after"] = "after",
    ) -> list[Block]:
        """Insert sanitized ``blocks`` next to ``reference`` (default: at the end)."""
        new_blocks = sanitize(list(blocks))
        if not new_blocks:
            return []
        for block in new_blocks:
            for node in self._walk([block]):
                self._ensure_id(node)

        if reference is None:
            self._blocks.extend(new_blocks)
        else:
            siblings, index = self._locate(_ref_id(reference))
            at = index if placement == "before" else index + 1
            siblings[at:at] = new_blocks
        self._notify()
        return [block.model_copy(deep=True) for block in new_blocks]

    def remove_blocks(self, refs: Iterable[BlockRef]) -> int:
        """Remove the referenced blocks (and their subtrees). Returns the count."""
        removed = 0
        for ref in refs:
            try:
                siblings, index = self._locate(_ref_id(ref))
            except KeyError:
                continue
            del siblings[index]
            removed += 1
        if removed:
            self._notify()
        return removed

    def replace_document(self, content: Any) -> None:
        """Replace the whole document (empty content resets to the default)."""
        self._blocks = sanitize(content) or default_document()
        for block in self._walk(self._blocks):
            self._ensure_id(block)
        self._notify()

    # ------------------------------- Subscriptions --------------------------

    def on_change(self, handler: ChangeHandler) -> Unsubscribe:
        """Subscribe ``handler``; the returned callable unsubscribes it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def _notify(self) -> None:
        for handler in list(self._handlers):
            handler(self)

    # ------------------------------- Internals ------------------------------

    @staticmethod
    def _walk(blocks: list[Block]) -> Iterator[Block]:
        for block in blocks:
            yield block
            yield from BlockEditor._walk(block.children)

    @staticmethod
    def _ensure_id(block: Block) -> None:
        if not block.id:
            block.id = uuid.uuid4().hex

    def _find(self, block_id: str) -> Block | None:
        for block in self._walk(self._blocks):
            if block.id == block_id:
                return block
        return None

    def _locate(self, block_id: str, blocks: list[Block] | None = None) -> tuple[list[Block], int]:
        siblings = self._blocks if blocks is None else blocks
        for index, block in enumerate(siblings):
            if block.id == block_id:
                return siblings, index
            try:
                return self._locate(block_id, block.children)
            except KeyError:
                continue
        raise KeyError(f"block {block_id!r} not found")


def attach_autosave(editor: BlockEditor, saver: DebouncedSaver) -> Unsubscribe:
    """Schedule a debounced save of ``editor.document`` on every change."""

    def _on_change(source: BlockEditor) -> None:
        saver.schedule(source.document)

    return editor.on_change(_on_change)


__all__ = [
    "BlockEditor",
    "BlockRef",
    "ChangeHandler",
    "EditingSurface",
    "Unsubscribe",
    "attach_autosave",
]
