"""Tests for the export rendering pipeline (blocks -> output nodes)."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from blockfolio.core.blocks.codec import encode_document
from blockfolio.core.blocks.sanitizer import sanitize
from blockfolio.core.contracts.block import Block, BlockType, TextSpan
from blockfolio.core.contracts.output import LinkRun, NodeRole, OutputNode, TextRun
from blockfolio.pipelines import export
from blockfolio.pipelines.export import (
    NumberedGroup,
    group_blocks,
    render,
    render_blocks,
    resolve_span_style,
)


def _nodes(raw: list[dict[str, Any]]) -> list[OutputNode]:
    return render(sanitize(raw), "Doc").output_nodes


# --------------------------------------------------------------------------- #
# Grouping
# --------------------------------------------------------------------------- #


def test_numbered_list_contiguity() -> None:
    """Ordinals restart after any non-numbered block."""
    nodes = _nodes(
        [
            {"type": "numberedListItem", "content": "A"},
            {"type": "numberedListItem", "content": "B"},
            {"type": "paragraph", "content": "C"},
            {"type": "numberedListItem", "content": "D"},
        ]
    )
    first, para, second = nodes
    assert first.role is NodeRole.ORDERED_LIST
    assert [(i.marker, i.text) for i in first.children] == [("1.", "A"), ("2.", "B")]
    assert para.role is NodeRole.PARAGRAPH and para.text == "C"
    assert [(i.marker, i.text) for i in second.children] == [("1.", "D")]


def test_bullets_are_not_grouped() -> None:
    units = group_blocks(
        sanitize(
            [{"type": "bulletListItem"}, {"type": "bulletListItem"}, {"type": "numberedListItem"}]
        )
    )
    assert isinstance(units[0], Block) and isinstance(units[1], Block)
    assert isinstance(units[2], NumberedGroup) and len(units[2].items) == 1

    nodes = _nodes(
        [
            {"type": "bulletListItem", "content": "x"},
            {"type": "bulletListItem", "content": "y"},
        ]
    )
    assert [n.role for n in nodes] == [NodeRole.LIST_ITEM, NodeRole.LIST_ITEM]
    assert all(n.marker == "•" for n in nodes)


def test_list_children_render_recursively_with_grouping() -> None:
    (item,) = _nodes(
        [
            {
                "type": "bulletListItem",
                "content": "parent",
                "children": [
                    {"type": "numberedListItem", "content": "a"},
                    {"type": "numberedListItem", "content": "b"},
                ],
            }
        ]
    )
    (group,) = item.children
    assert group.role is NodeRole.ORDERED_LIST
    assert [c.marker for c in group.children] == ["1.", "2."]


# --------------------------------------------------------------------------- #
# Per-block rules
# --------------------------------------------------------------------------- #


def test_every_block_type_has_a_handler() -> None:
    for kind in BlockType:
        assert callable(export.handler_for(kind)), kind


@pytest.mark.parametrize(  # type: ignore[misc]
    ("level", "expected"),
    [(None, 1), (1, 1), (2, 2), (3, 3), (7, 3), (0, 1), ("2", 2), ("1", 1), ("h2", 3), ("", 1)],
)
def test_heading_levels(level: Any, expected: int) -> None:
    props = {} if level is None else {"level": level}
    (node,) = _nodes([{"type": "heading", "props": props, "content": "H"}])
    assert node.role is NodeRole.HEADING
    assert node.level == expected
    assert node.style["font_size"] == {1: 24, 2: 20, 3: 16}[expected]


def test_blank_paragraph_becomes_spacer() -> None:
    spacer, para = _nodes(
        [{"type": "paragraph", "content": "   "}, {"type": "paragraph", "content": "text"}]
    )
    assert spacer.role is NodeRole.SPACER and spacer.runs == []
    assert para.role is NodeRole.PARAGRAPH and para.text == "text"


def test_image_rules() -> None:
    assert _nodes([{"type": "image", "props": {"url": ""}}]) == []
    assert _nodes([{"type": "image"}]) == []

    (img,) = _nodes([{"type": "image", "props": {"url": "a.png", "caption": "Fig 1"}}])
    assert img.role is NodeRole.IMAGE and img.src == "a.png"
    assert img.style["max_height"] == 300
    (caption,) = img.children
    assert caption.role is NodeRole.CAPTION and caption.text == "Fig 1"


def test_code_block_ignores_styling() -> None:
    (code,) = _nodes(
        [
            {
                "type": "codeBlock",
                "content": [{"type": "text", "text": "x = 1", "styles": {"bold": True}}],
            }
        ]
    )
    assert code.role is NodeRole.CODE_BLOCK
    assert code.runs == [TextRun(text="x = 1")]
    assert code.style["font_family"] == "Courier"


def test_quote_and_divider() -> None:
    quote, divider = _nodes([{"type": "quote", "content": "wise"}, {"type": "divider"}])
    assert quote.role is NodeRole.QUOTE and quote.text == "wise"
    assert quote.style["border_left_color"] == "#3b82f6"
    assert divider.role is NodeRole.DIVIDER and divider.runs == [] and divider.children == []


def test_unknown_block_fallback() -> None:
    (node,) = _nodes([{"type": "madeUpType", "content": "hello"}])
    assert node.role is NodeRole.PARAGRAPH and node.text == "hello"
    assert node.block_type == "madeUpType"

    assert _nodes([{"type": "madeUpType"}]) == []


# --------------------------------------------------------------------------- #
# Project cards
# --------------------------------------------------------------------------- #


def test_project_card_round_trip() -> None:
    """Nested content decodes and renders through the same pipeline."""
    nested = sanitize(
        [
            {"type": "heading", "content": "Title"},
            {"type": "paragraph", "content": "Body"},
            {"type": "image", "props": {"url": "x.png"}},
        ]
    )
    (card,) = _nodes(
        [
            {
                "type": "projectCard",
                "props": {
                    "title": "Site",
                    "coverImage": "cover.png",
                    "nestedContent": encode_document(nested),
                },
            }
        ]
    )
    assert card.role is NodeRole.CARD
    title, cover, content = card.children
    assert title.role is NodeRole.CARD_TITLE and title.text == "Site"
    assert cover.role is NodeRole.IMAGE and cover.src == "cover.png"
    assert content.role is NodeRole.CARD_CONTENT

    heading, para, image = content.children
    assert heading.role is NodeRole.HEADING and heading.text == "Title"
    assert para.role is NodeRole.PARAGRAPH and "Body" in para.text
    assert image.role is NodeRole.IMAGE and image.src == "x.png"


def test_project_card_tolerates_bad_nested_content() -> None:
    for encoded in ["not json", '{"type": "x"}', "[]"]:
        props = {"nestedContent": encoded, "coverImage": "  "}
        (card,) = _nodes([{"type": "projectCard", "props": props}])
        assert [c.role for c in card.children] == [NodeRole.CARD_TITLE]
        assert card.children[0].text == "Untitled Project"


# --------------------------------------------------------------------------- #
# Inline styles
# --------------------------------------------------------------------------- #


def test_inline_style_resolution() -> None:
    style = resolve_span_style(TextSpan(text="x", styles={"bold": True, "italic": True}))
    assert style == {"font_weight": "bold", "font_style": "italic"}

    both = resolve_span_style(TextSpan(text="x", styles={"underline": True, "strikethrough": True}))
    assert both["text_decoration"] == "line-through"

    code = resolve_span_style(TextSpan(text="x", styles={"code": True}))
    assert code["font_family"] == "Courier" and code["font_size"] == 10

    assert resolve_span_style(TextSpan(text="x", styles={"bold": False})) == {}


def test_links_default_href() -> None:
    (para,) = _nodes(
        [
            {
                "type": "paragraph",
                "content": [
                    {
                        "type": "link",
                        "content": [{"type": "text", "text": "a", "styles": {"bold": True}}],
                    },
                    {"type": "link", "href": "https://b", "content": "b"},
                ],
            }
        ]
    )
    first, second = para.runs
    assert isinstance(first, LinkRun) and first.href == "#"
    assert isinstance(first.runs[0], TextRun) and first.runs[0].style == {"font_weight": "bold"}
    assert isinstance(second, LinkRun) and second.href == "https://b"


# --------------------------------------------------------------------------- #
# Assembly & failure isolation
# --------------------------------------------------------------------------- #


def test_title_and_footer_always_present() -> None:
    doc = render([], "Empty", exported_on=date(2026, 10, 18), generator="Blockfolio")
    assert doc.title_node.role is NodeRole.TITLE and doc.title_node.text == "Empty"
    assert doc.output_nodes == []
    assert doc.footer_node.fixed is True
    assert doc.footer_node.text == "Exported on October 18, 2026 • Generated by Blockfolio"


def test_failing_block_becomes_placeholder(monkeypatch: Any) -> None:
    """One failing block never aborts the batch."""

    def boom(block: Block) -> list[OutputNode]:
        raise RuntimeError("bad quote")

    monkeypatch.setitem(export._HANDLERS, BlockType.QUOTE, boom)
    before, placeholder, after = render_blocks(
        sanitize(
            [
                {"type": "paragraph", "content": "a"},
                {"type": "quote", "content": "q"},
                {"type": "paragraph", "content": "b"},
            ]
        )
    )
    assert before.text == "a" and after.text == "b"
    assert placeholder.role is NodeRole.PLACEHOLDER
    assert placeholder.block_type == "quote"
    assert placeholder.text == export.ERROR_PLACEHOLDER
