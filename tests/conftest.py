"""Shared fixtures for the Blockfolio test suite."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from blockfolio.api.workspace import Workspace
from blockfolio.core.settings import load_settings


@pytest.fixture(autouse=True)  # type: ignore[misc]
def isolated_settings(tmp_path: Path, monkeypatch: Any) -> Iterator[None]:
    """Point storage at a temp dir and rebuild settings around every test."""
    monkeypatch.setenv("BLOCKFOLIO_ENV", "test")
    monkeypatch.setenv("BLOCKFOLIO_STORAGE_DIR", str(tmp_path / "store"))
    load_settings.cache_clear()
    yield
    Workspace.set_instance(None)
    load_settings.cache_clear()


@pytest.fixture  # type: ignore[misc]
def sample_document() -> list[dict[str, Any]]:
    """A small document touching most block types."""
    return [
        {"id": "h1", "type": "heading", "props": {"level": 1}, "content": "Portfolio"},
        {"id": "p1", "type": "paragraph", "content": "Selected work"},
        {"id": "n1", "type": "numberedListItem", "content": "First"},
        {"id": "n2", "type": "numberedListItem", "content": "Second"},
        {"id": "b1", "type": "bulletListItem", "content": "Point"},
        {"id": "d1", "type": "divider"},
    ]
