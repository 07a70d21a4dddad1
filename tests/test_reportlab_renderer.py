"""Tests for the reportlab page-layout renderer adapter."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from PIL import Image as PILImage

from blockfolio.core.blocks.codec import encode_document
from blockfolio.core.blocks.sanitizer import sanitize
from blockfolio.core.contracts.output import DocumentInfo, LinkRun, OutputNode, TextRun
from blockfolio.layout.reportlab_renderer import ReportLabRenderer, runs_markup
from blockfolio.pipelines.export import render

INFO = DocumentInfo(title="Doc", author="Tester", subject="Tests", keywords="a, b")


def _pdf(raw: list[dict[str, Any]], renderer: ReportLabRenderer | None = None) -> bytes:
    tree = render(sanitize(raw), "Doc")
    return asyncio.run((renderer or ReportLabRenderer()).render(tree, INFO))


def test_renders_every_block_type(tmp_path: Path) -> None:
    image_path = tmp_path / "pixel.png"
    PILImage.new("RGB", (40, 20), "red").save(image_path)
    nested = sanitize(
        [
            {"type": "heading", "content": "Inside"},
            {"type": "numberedListItem", "content": "one"},
            {"type": "image", "props": {"url": str(image_path)}},
        ]
    )
    data = _pdf(
        [
            {"type": "heading", "props": {"level": 2}, "content": "Heading"},
            {
                "type": "paragraph",
                "content": [
                    {"type": "text", "text": "a < b & c", "styles": {"bold": True, "code": True}},
                    {"type": "link", "href": "https://example.com", "content": "link"},
                ],
            },
            {"type": "paragraph"},
            {
                "type": "bulletListItem",
                "content": "bullet",
                "children": [{"type": "bulletListItem"}],
            },
            {"type": "numberedListItem", "content": "first"},
            {"type": "image", "props": {"url": str(image_path), "caption": "Pixel"}},
            {"type": "codeBlock", "content": "def f():\n    return 1"},
            {"type": "quote", "content": "quoted"},
            {"type": "divider"},
            {
                "type": "projectCard",
                "props": {
                    "title": "Card",
                    "coverImage": str(image_path),
                    "nestedContent": encode_document(nested),
                },
            },
            {"type": "madeUpType", "content": "fallback"},
        ]
    )
    assert data.startswith(b"%PDF")
    assert data.rstrip().endswith(b"%%EOF")


def test_unloadable_image_degrades_to_text(tmp_path: Path) -> None:
    data = _pdf([{"type": "image", "props": {"url": str(tmp_path / "missing.png")}}])
    assert data.startswith(b"%PDF")


def test_empty_document_still_has_title_page() -> None:
    assert _pdf([]).startswith(b"%PDF")


def test_footer_drawn_on_every_page(monkeypatch: Any) -> None:
    renderer = ReportLabRenderer()
    footers: list[str] = []

    def record(canvas: Any, node: OutputNode) -> None:
        footers.append(node.text)

    monkeypatch.setattr(renderer, "_draw_footer", record)
    _pdf([{"type": "paragraph", "content": f"line {i}"} for i in range(150)], renderer)

    assert len(footers) >= 2
    assert len(set(footers)) == 1
    assert footers[0].startswith("Exported on ")


def test_runs_markup_escapes_and_styles() -> None:
    markup = runs_markup(
        [
            TextRun(text="x<y", style={"font_weight": "bold", "text_decoration": "line-through"}),
            LinkRun(
                href='https://e.com/?a="1"&b',
                style={"color": "#3b82f6", "text_decoration": "underline"},
                runs=[TextRun(text="go", style={"font_style": "italic"})],
            ),
        ]
    )
    assert markup.startswith("<b><strike>x&lt;y</strike></b>")
    assert 'href="https://e.com/?a=&quot;1&quot;&amp;b"' in markup
    assert "<u><i>go</i></u>" in markup


# --------------------------------------------------------------------------- #
# Containers taller than one page
# --------------------------------------------------------------------------- #


def test_long_numbered_list_spans_pages() -> None:
    data = _pdf([{"type": "numberedListItem", "content": f"item {i}"} for i in range(120)])
    assert data.startswith(b"%PDF")


def test_long_card_spans_pages() -> None:
    nested = sanitize([{"type": "paragraph", "content": f"detail {i}"} for i in range(80)])
    data = _pdf(
        [
            {
                "type": "projectCard",
                "props": {"title": "Long", "nestedContent": encode_document(nested)},
            }
        ]
    )
    assert data.startswith(b"%PDF")


def test_bullet_with_many_children_spans_pages() -> None:
    children = [{"type": "bulletListItem", "content": f"child {i}"} for i in range(120)]
    data = _pdf([{"type": "bulletListItem", "content": "parent", "children": children}])
    assert data.startswith(b"%PDF")


def test_long_quote_spans_pages() -> None:
    data = _pdf([{"type": "quote", "content": "a long quoted sentence " * 800}])
    assert data.startswith(b"%PDF")
