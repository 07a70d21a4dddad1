"""
In-memory document store.

Keeps encoded documents in a plain dictionary, keyed like the file store.
Used by tests and by callers that do not want anything on disk; every
instance is independent, so several documents can live in one process.
"""

from __future__ import annotations

from blockfolio.core.storage.store import DocumentStore


class MemoryStore(DocumentStore):
    """Dictionary-backed :class:`DocumentStore`.

    Attributes
    ----------
    _store : dict[str, str]
        Encoded document text per key.
    _rev : int
        Monotonically increasing revision counter (bumps on every write/delete).
    """

    __slots__ = ("_store", "_rev")

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self._rev: int = 0

    def _read(self, key: str) -> str | None:
        return self._store.get(key)

    def _write(self, key: str, text: str) -> None:
        self._store[key] = text
        self._rev += 1

    def _delete(self, key: str) -> None:
        if self._store.pop(key, None) is not None:
            self._rev += 1

    @property
    def revision(self) -> int:
        """Number of mutations applied so far."""
        return self._rev

    def keys(self) -> tuple[str, ...]:
        """Return the current keys as a sorted tuple (stable for tests)."""
        return tuple(sorted(self._store.keys()))

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._store)


__all__ = ["MemoryStore"]
