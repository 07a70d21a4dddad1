"""Disk-backed document store.

One JSON file per key under a base directory:

- Default directory: ``BLOCKFOLIO_STORAGE_DIR`` (settings) or ``.blockfolio/``
- Filename pattern:  ``<key>.json`` with unsafe characters replaced by ``_``

Writes go to a temporary sibling first and are moved into place, so a crash
mid-write never leaves a truncated document behind.

Usage
-----
>>> store = FileStore()  # uses the configured dir
>>> store.save("portfolio", blocks)
True
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from blockfolio.core.settings import load_settings
from blockfolio.core.storage.store import DocumentStore

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


class FileStore(DocumentStore):
    """Persist documents as JSON files."""

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self.base_dir: Path = (
            Path(base_dir) if base_dir is not None else load_settings().storage_dir
        )
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Return the file path used for ``key``."""
        safe = _UNSAFE.sub("_", key) or "_"
        return self.base_dir / f"{safe}.json"

    def _read(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, text: str) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".json.tmp")
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
            f.write("\n")
        os.replace(tmp, path)

    def _delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


__all__ = ["FileStore"]
