"""Tests for the tree search utilities."""

from __future__ import annotations

from blockfolio.core.blocks.sanitizer import sanitize
from blockfolio.core.blocks.search import extract_text, find_first_image
from blockfolio.core.contracts.block import LinkSpan, TextSpan


def test_no_image_returns_empty_string() -> None:
    assert find_first_image(sanitize([{"type": "paragraph"}, {"type": "divider"}])) == ""
    assert find_first_image([]) == ""


def test_first_image_in_document_order() -> None:
    blocks = sanitize(
        [
            {"type": "paragraph", "content": "x"},
            {"type": "image", "props": {"url": "first.png"}},
            {"type": "image", "props": {"url": "second.png"}},
        ]
    )
    assert find_first_image(blocks) == "first.png"


def test_images_without_url_are_skipped() -> None:
    blocks = sanitize(
        [
            {"type": "image", "props": {"url": ""}},
            {"type": "image", "props": {"url": 5}},
            {"type": "image", "props": {"url": "ok.png"}},
        ]
    )
    assert find_first_image(blocks) == "ok.png"


def test_search_descends_content_but_not_children() -> None:
    """Only the `content` axis is searched; `children` are ignored."""
    in_children = sanitize(
        [{"type": "bulletListItem", "children": [{"type": "image", "props": {"url": "c.png"}}]}]
    )
    assert find_first_image(in_children) == ""

    in_content = sanitize(
        [
            {
                "type": "paragraph",
                "content": [
                    {"type": "text", "text": "t"},
                    {"type": "image", "props": {"url": "n.png"}},
                ],
            },
            {"type": "image", "props": {"url": "later.png"}},
        ]
    )
    assert find_first_image(in_content) == "n.png"


def test_extract_text_concatenates_without_separators() -> None:
    content = [
        TextSpan(text="Hello"),
        LinkSpan(href="#", content=[TextSpan(text=", "), TextSpan(text="world")]),
        "!",
    ]
    assert extract_text(content) == "Hello, world!"
    assert extract_text("raw") == "raw"
    assert extract_text(None) == ""
    assert extract_text(12) == ""
