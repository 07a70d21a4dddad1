"""
Key-value persistence for whole block documents.

The store keeps one encoded document per key. Concrete backends only provide
raw text access (`_read`, `_write`, `_delete`); the document semantics live
here so that every backend behaves the same way:

- ``save`` encodes the block list and reports success as a boolean.
- ``load`` returns the sanitized blocks, or ``None`` when nothing usable is
  stored. Corrupt entries (invalid JSON, non-array payloads) are cleared.
- ``clear`` removes the key; ``exists`` checks for non-blank stored text.

None of these raise for storage or decode problems: the in-memory document
is the authority while a session is live, so persistence failures are logged
and absorbed.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from blockfolio.core.blocks.sanitizer import sanitize, to_plain_data
from blockfolio.core.contracts.block import Block
from blockfolio.core.settings import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StorageInfo:
    """Diagnostic summary of what is stored under a key."""

    key: str
    present: bool
    value_type: str | None = None
    is_array: bool = False
    length: int | None = None
    error: str | None = None

    def describe(self) -> str:
        """Human-readable one-liner."""
        if self.error:
            return f"Error: {self.error}"
        if not self.present:
            return "No saved content found"
        length = self.length if self.length is not None else "N/A"
        return f"Type: {self.value_type}, IsArray: {self.is_array}, Length: {length}"


class DocumentStore(ABC):
    """Abstract document store over a raw text backend."""

    @abstractmethod
    def _read(self, key: str) -> str | None:
        """Return the raw text stored under ``key`` or ``None``."""

    @abstractmethod
    def _write(self, key: str, text: str) -> None:
        """Store ``text`` under ``key``."""

    @abstractmethod
    def _delete(self, key: str) -> None:
        """Remove ``key``; missing keys are not an error."""

    # ------------------------------- Document API ---------------------------

    def save(self, key: str, blocks: Sequence[Block | Any]) -> bool:
        """Persist ``blocks`` under ``key``. Returns ``False`` on failure."""
        try:
            text = json.dumps(to_plain_data(list(blocks)), ensure_ascii=False)
            self._write(key, text)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save document under %r: %s", key, exc)
            return False
        logger.debug("Document saved under %r", key)
        return True

    def load(self, key: str) -> list[Block] | None:
        """Load the document stored under ``key``.

        Returns
        -------
        list[Block] | None
            The sanitized blocks, or ``None`` when nothing is stored, the entry
            is corrupt (it is cleared), or it holds no blocks.
        """
        try:
            text = self._read(key)
        except UnicodeDecodeError as exc:
            logger.error("Stored document under %r is not valid text, clearing it: %s", key, exc)
            self.clear(key)
            return None
        except OSError as exc:
            logger.error("Failed to read document under %r: %s", key, exc)
            return None

        if text is None or not text.strip():
            logger.info("No saved document found under %r", key)
            return None

        try:
            payload = json.loads(text)
        except ValueError as exc:
            logger.error("Stored document under %r is corrupt, clearing it: %s", key, exc)
            self.clear(key)
            return None

        if not isinstance(payload, list):
            logger.error("Stored document under %r is not an array, clearing it", key)
            self.clear(key)
            return None

        if not payload:
            logger.warning("Stored document under %r is an empty array", key)
            return None

        blocks = sanitize(payload)
        if not blocks:
            logger.warning("Stored document under %r holds no valid blocks", key)
            return None

        logger.debug("Document loaded from %r (%d blocks)", key, len(blocks))
        return blocks

    def clear(self, key: str) -> bool:
        """Remove the document under ``key``. Returns ``False`` on failure."""
        try:
            self._delete(key)
        except OSError as exc:
            logger.error("Failed to clear document under %r: %s", key, exc)
            return False
        logger.debug("Document cleared under %r", key)
        return True

    def exists(self, key: str) -> bool:
        """Return ``True`` when non-blank text (or undecodable bytes) is stored under ``key``."""
        try:
            text = self._read(key)
        except UnicodeDecodeError:
            return True
        except OSError:
            return False
        return text is not None and text.strip() != ""

    def inspect(self, key: str) -> StorageInfo:
        """Describe the stored value without interpreting it as blocks."""
        try:
            text = self._read(key)
        except UnicodeDecodeError as exc:
            return StorageInfo(key=key, present=True, error=str(exc))
        except OSError as exc:
            return StorageInfo(key=key, present=False, error=str(exc))
        if text is None:
            return StorageInfo(key=key, present=False)
        try:
            payload = json.loads(text)
        except ValueError as exc:
            return StorageInfo(key=key, present=True, error=str(exc))
        is_array = isinstance(payload, list)
        return StorageInfo(
            key=key,
            present=True,
            value_type=type(payload).__name__,
            is_array=is_array,
            length=len(payload) if is_array else None,
        )


__all__ = ["DocumentStore", "StorageInfo"]
