"""Tests for the block document model and output contracts."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from blockfolio.core.contracts.block import (
    Block,
    BlockType,
    LinkSpan,
    ProjectCardProps,
    TextSpan,
    default_document,
    new_project_card,
)
from blockfolio.core.contracts.output import LinkRun, NodeRole, OutputNode, TextRun, runs_text


def test_block_kind_maps_unknown_types() -> None:
    """Known type strings map onto the enum; anything else is UNKNOWN."""
    assert Block(type="heading").kind is BlockType.HEADING
    assert Block(type="projectCard").kind is BlockType.PROJECT_CARD

    odd = Block(type="madeUpType")
    assert odd.kind is BlockType.UNKNOWN
    assert odd.type == "madeUpType"


def test_block_requires_non_empty_type() -> None:
    with pytest.raises(ValidationError):
        Block(type="")


def test_inline_content_discriminates_by_type() -> None:
    """Dict content is routed to text, link, or nested block models."""
    block = Block.model_validate(
        {
            "type": "paragraph",
            "content": [
                {"type": "text", "text": "a", "styles": {"bold": True}},
                {"type": "link", "href": "https://x", "content": [{"type": "text", "text": "b"}]},
                {"type": "image", "props": {"url": "x.png"}},
            ],
        }
    )
    text, link, nested = block.content
    assert isinstance(text, TextSpan) and text.has_style("bold")
    assert not text.has_style("italic")
    assert isinstance(link, LinkSpan) and isinstance(link.content[0], TextSpan)
    assert isinstance(nested, Block) and nested.prop("url") == "x.png"


def test_project_card_props_view() -> None:
    """The typed view ignores non-string values and dumps under bag names."""
    block = Block(type="projectCard", props={"title": "Site", "coverImage": 3, "nestedContent": ""})
    view = ProjectCardProps.from_block(block)
    assert view.title == "Site"
    assert view.subtext == "Project description"
    assert view.cover_image == ""
    assert set(view.as_props()) == {"title", "subtext", "coverImage", "nestedContent"}


def test_factories() -> None:
    card = new_project_card()
    assert card.kind is BlockType.PROJECT_CARD
    assert card.props == {
        "title": "New Project",
        "subtext": "Project description",
        "coverImage": "",
        "nestedContent": "",
    }

    doc = default_document()
    assert [b.type for b in doc] == ["paragraph", "paragraph"]
    first = doc[0].content[0]
    assert isinstance(first, TextSpan) and first.text == "Press '/' and type: project"
    assert doc[1].content == []


def test_output_node_text_flattens_links() -> None:
    node = OutputNode(
        role=NodeRole.PARAGRAPH,
        runs=[TextRun(text="see "), LinkRun(href="#", runs=[TextRun(text="here")])],
    )
    assert node.text == "see here"
    assert runs_text([]) == ""


def test_output_node_level_bounds() -> None:
    with pytest.raises(ValidationError):
        OutputNode(role=NodeRole.HEADING, level=4)
