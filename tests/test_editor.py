"""Tests for the in-memory editing surface."""

from __future__ import annotations

from typing import Any

import pytest

from blockfolio.core.contracts.block import TextSpan
from blockfolio.core.storage.debounce import DebouncedSaver
from blockfolio.core.storage.memory import MemoryStore
from blockfolio.editor.surface import BlockEditor, attach_autosave


def test_empty_editor_starts_with_default_document() -> None:
    for initial in (None, [], [{"bad": 1}]):
        editor = BlockEditor(initial)
        first = editor.document[0].content[0]
        assert isinstance(first, TextSpan) and first.text == "Press '/' and type: project"


def test_ids_are_assigned_recursively() -> None:
    editor = BlockEditor(
        [
            {"type": "bulletListItem", "children": [{"type": "bulletListItem"}]},
            {"id": "keep", "type": "divider"},
        ]
    )
    outer, divider = editor.document
    assert outer.id and outer.children[0].id
    assert divider.id == "keep"


def test_document_returns_copies(sample_document: list[dict[str, Any]]) -> None:
    editor = BlockEditor(sample_document)
    snapshot = editor.document
    snapshot[0].props["level"] = 3
    assert editor.document[0].props["level"] == 1


def test_update_block_merges_primitive_props(sample_document: list[dict[str, Any]]) -> None:
    editor = BlockEditor(sample_document)
    seen: list[int] = []
    editor.on_change(lambda e: seen.append(len(e.document)))

    updated = editor.update_block("h1", props={"level": 2, "extra": {"nested": True}, "tag": "x"})

    assert updated.props == {"level": 2, "tag": "x"}
    assert seen == [len(sample_document)]


def test_update_block_finds_nested_blocks() -> None:
    editor = BlockEditor(
        [{"id": "p", "type": "bulletListItem", "children": [{"id": "c", "type": "bulletListItem"}]}]
    )
    editor.update_block("c", props={"flag": True})
    child = editor.get_block("c")
    assert child is not None and child.props == {"flag": True}


def test_update_unknown_block_raises() -> None:
    editor = BlockEditor()
    with pytest.raises(KeyError):
        editor.update_block("missing", props={"a": 1})


def test_unsubscribe_stops_notifications(sample_document: list[dict[str, Any]]) -> None:
    editor = BlockEditor(sample_document)
    calls: list[str] = []
    unsubscribe = editor.on_change(lambda e: calls.append("x"))

    editor.update_block("p1", props={"a": 1})
    unsubscribe()
    unsubscribe()
    editor.update_block("p1", props={"a": 2})

    assert calls == ["x"]


def test_insert_and_remove_blocks(sample_document: list[dict[str, Any]]) -> None:
    editor = BlockEditor(sample_document)
    inserted = editor.insert_blocks(
        [{"type": "quote", "content": "q"}], reference="h1", placement="before"
    )
    assert editor.document[0].type == "quote"
    assert inserted[0].id

    editor.insert_blocks([{"type": "divider", "id": "end"}])
    assert editor.document[-1].id == "end"

    assert editor.remove_blocks(["end", "missing", inserted[0]]) == 2
    assert editor.document[0].id == "h1"


def test_replace_document_resets_on_empty(sample_document: list[dict[str, Any]]) -> None:
    editor = BlockEditor(sample_document)
    editor.replace_document([])
    assert [b.type for b in editor.document] == ["paragraph", "paragraph"]


def test_attach_autosave_persists_changes(sample_document: list[dict[str, Any]]) -> None:
    store = MemoryStore()
    editor = BlockEditor(sample_document)
    saver = DebouncedSaver(store, "doc")
    detach = attach_autosave(editor, saver)

    editor.update_block("h1", props={"level": 2})
    loaded = store.load("doc")
    assert loaded is not None and loaded[0].props["level"] == 2

    detach()
    editor.update_block("h1", props={"level": 3})
    assert saver.writes == 1
