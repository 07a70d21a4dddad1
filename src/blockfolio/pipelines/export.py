"""
Export rendering pipeline: block document -> render-ready output nodes.

Stages
------
1. **Group**: consecutive ``numberedListItem`` blocks are collected into one
   :class:`NumberedGroup` so ordinals are contiguous and restart after any
   other block. Bullet items are never grouped.
2. **Render**: each unit is dispatched through ``_HANDLERS`` (one entry per
   :class:`~blockfolio.core.contracts.block.BlockType`). A failing block
   becomes a placeholder node; the batch never aborts.
3. **Assemble**: a title node first, the content nodes, and a footer node
   flagged to repeat on every page.

Everything here is pure and synchronous apart from diagnostic logging. The
page-layout renderer consumes the resulting
:class:`~blockfolio.core.contracts.output.RenderedDocument`.

Example
-------
>>> doc = render(sanitize([{"type": "paragraph", "content": "Hi"}]), "Notes")
>>> doc.output_nodes[0].text
'Hi'
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from blockfolio.core.blocks.codec import decode_document
from blockfolio.core.blocks.search import extract_text
from blockfolio.core.contracts.block import Block, BlockType, LinkSpan, TextSpan
from blockfolio.core.contracts.output import (
    LinkRun,
    NodeRole,
    OutputNode,
    RenderedDocument,
    StyleMap,
    TextRun,
)
from blockfolio.core.settings import get_logger
from blockfolio.pipelines import styles

logger = get_logger(__name__)

DEFAULT_GENERATOR = "BlockNote Portfolio"
DEFAULT_CARD_HEADING = "Untitled Project"
ERROR_PLACEHOLDER = "Error rendering this element"
BULLET_MARKER = "•"


# --------------------------------------------------------------------------- #
# Grouping
# --------------------------------------------------------------------------- #


@dataclass
class NumberedGroup:
    """A contiguous run of numbered list items."""

    items: list[Block] = field(default_factory=list)


Unit = Block | NumberedGroup


def group_blocks(blocks: Sequence[Block]) -> list[Unit]:
    """Collect consecutive numbered items; pass everything else through."""
    units: list[Unit] = []
    run: NumberedGroup | None = None
    for block in blocks:
        if block.kind is BlockType.NUMBERED_LIST_ITEM:
            if run is None:
                run = NumberedGroup()
                units.append(run)
            run.items.append(block)
        else:
            run = None
            units.append(block)
    return units


# --------------------------------------------------------------------------- #
# Inline style resolution
# --------------------------------------------------------------------------- #


def resolve_span_style(span: TextSpan) -> StyleMap:
    """Compose presentation attributes from a span's style flags.

    Flags apply in :data:`styles.INLINE_FLAGS` order, so strikethrough wins
    over underline on the shared ``text_decoration`` channel.
    """
    style: StyleMap = {}
    for flag, attrs in styles.INLINE_FLAGS:
        if span.has_style(flag):
            style.update(attrs)
    return style


def render_inline(content: Sequence[Any]) -> list[TextRun | LinkRun]:
    """Resolve inline content into runs.

    Text spans keep their text; links wrap their resolved children and fall
    back to ``"#"`` when ``href`` is missing. Embedded blocks have no inline
    rendering and are skipped.
    """
    runs: list[TextRun | LinkRun] = []
    for item in content:
        if isinstance(item, TextSpan):
            runs.append(TextRun(text=item.text, style=resolve_span_style(item)))
        elif isinstance(item, LinkSpan):
            href = item.href if isinstance(item.href, str) and item.href else "#"
            runs.append(
                LinkRun(href=href, style=dict(styles.LINK), runs=render_inline(item.content))
            )
    return runs


# --------------------------------------------------------------------------- #
# Per-block handlers
# --------------------------------------------------------------------------- #

Handler = Callable[[Block], list[OutputNode]]


def _heading_level(value: Any) -> int:
    if not value:
        return 1
    try:
        level = int(value)
    except (TypeError, ValueError):
        return 3
    return level if level in (1, 2) else 3


def _render_heading(block: Block) -> list[OutputNode]:
    level = _heading_level(block.prop("level"))
    return [
        OutputNode(
            role=NodeRole.HEADING,
            level=level,
            style=dict(styles.HEADINGS[level]),
            runs=render_inline(block.content),
            block_type=block.type,
        )
    ]


def _render_paragraph(block: Block) -> list[OutputNode]:
    if not extract_text(block.content).strip():
        return [OutputNode(role=NodeRole.SPACER, style=dict(styles.SPACER), block_type=block.type)]
    return [
        OutputNode(
            role=NodeRole.PARAGRAPH,
            style=dict(styles.PARAGRAPH),
            runs=render_inline(block.content),
            block_type=block.type,
        )
    ]


def _list_item(block: Block, marker: str) -> OutputNode:
    return OutputNode(
        role=NodeRole.LIST_ITEM,
        marker=marker,
        style=dict(styles.LIST_ITEM),
        runs=render_inline(block.content),
        children=render_blocks(block.children),
        block_type=block.type,
    )


def _render_bullet_item(block: Block) -> list[OutputNode]:
    return [_list_item(block, BULLET_MARKER)]


def _render_numbered_item(block: Block) -> list[OutputNode]:
    # Reached only for a lone item outside a group.
    return [_list_item(block, "1.")]


def _render_numbered_group(group: NumberedGroup) -> OutputNode:
    items: list[OutputNode] = []
    for position, block in enumerate(group.items):
        marker = f"{position + 1}."
        items.extend(_render_safely(block, lambda b, m=marker: [_list_item(b, m)]))
    return OutputNode(role=NodeRole.ORDERED_LIST, style=dict(styles.LIST), children=items)


def _image_node(src: str, style: StyleMap, block_type: str) -> OutputNode:
    return OutputNode(role=NodeRole.IMAGE, src=src, style=dict(style), block_type=block_type)


def _render_image(block: Block) -> list[OutputNode]:
    url = block.prop("url")
    if not isinstance(url, str) or not url:
        return []
    node = _image_node(url, styles.IMAGE, block.type)
    caption = block.prop("caption")
    if isinstance(caption, str) and caption:
        node.children.append(
            OutputNode(
                role=NodeRole.CAPTION,
                style=dict(styles.CAPTION),
                runs=[TextRun(text=caption)],
            )
        )
    return [node]


def _render_code_block(block: Block) -> list[OutputNode]:
    return [
        OutputNode(
            role=NodeRole.CODE_BLOCK,
            style=dict(styles.CODE_BLOCK),
            runs=[TextRun(text=extract_text(block.content))],
            block_type=block.type,
        )
    ]


def _render_quote(block: Block) -> list[OutputNode]:
    return [
        OutputNode(
            role=NodeRole.QUOTE,
            style=dict(styles.QUOTE),
            runs=render_inline(block.content),
            block_type=block.type,
        )
    ]


def _render_divider(block: Block) -> list[OutputNode]:
    return [OutputNode(role=NodeRole.DIVIDER, style=dict(styles.DIVIDER), block_type=block.type)]


def _render_project_card(block: Block) -> list[OutputNode]:
    title = block.prop("title")
    if not isinstance(title, str) or not title:
        title = DEFAULT_CARD_HEADING
    card = OutputNode(role=NodeRole.CARD, style=dict(styles.CARD), block_type=block.type)
    card.children.append(
        OutputNode(
            role=NodeRole.CARD_TITLE,
            style=dict(styles.CARD_TITLE),
            runs=[TextRun(text=title)],
        )
    )

    cover = block.prop("coverImage")
    if isinstance(cover, str) and cover.strip():
        card.children.append(_image_node(cover, styles.CARD_IMAGE, block.type))

    encoded = block.prop("nestedContent")
    if isinstance(encoded, str) and encoded:
        decoded = decode_document(encoded)
        if decoded.is_err():
            logger.warning(
                "Ignoring nested content of project card %s: %s", block.id, decoded.unwrap_err()
            )
        if nested := decoded.get_or([]):
            card.children.append(
                OutputNode(
                    role=NodeRole.CARD_CONTENT,
                    style=dict(styles.CARD_CONTENT),
                    children=render_blocks(nested),
                )
            )
    return [card]


def _render_unknown(block: Block) -> list[OutputNode]:
    text = extract_text(block.content)
    if not text.strip():
        return []
    return [
        OutputNode(
            role=NodeRole.PARAGRAPH,
            style=dict(styles.PARAGRAPH),
            runs=[TextRun(text=text)],
            block_type=block.type,
        )
    ]


_HANDLERS: dict[BlockType, Handler] = {
    BlockType.HEADING: _render_heading,
    BlockType.PARAGRAPH: _render_paragraph,
    BlockType.BULLET_LIST_ITEM: _render_bullet_item,
    BlockType.NUMBERED_LIST_ITEM: _render_numbered_item,
    BlockType.IMAGE: _render_image,
    BlockType.CODE_BLOCK: _render_code_block,
    BlockType.QUOTE: _render_quote,
    BlockType.DIVIDER: _render_divider,
    BlockType.PROJECT_CARD: _render_project_card,
    BlockType.UNKNOWN: _render_unknown,
}


def handler_for(kind: BlockType) -> Handler:
    """Return the handler registered for ``kind``."""
    return _HANDLERS[kind]


# --------------------------------------------------------------------------- #
# Orchestration
# --------------------------------------------------------------------------- #


def _placeholder(block: Block) -> OutputNode:
    return OutputNode(
        role=NodeRole.PLACEHOLDER,
        style=dict(styles.PLACEHOLDER),
        runs=[TextRun(text=ERROR_PLACEHOLDER)],
        block_type=block.type,
    )


def _render_safely(block: Block, handler: Handler) -> list[OutputNode]:
    try:
        return handler(block)
    except Exception:
        logger.exception("Failed to render %s block %s", block.type, block.id)
        return [_placeholder(block)]


def render_blocks(blocks: Sequence[Block]) -> list[OutputNode]:
    """Group and render a block sequence (also used for nested documents)."""
    nodes: list[OutputNode] = []
    for unit in group_blocks(blocks):
        if isinstance(unit, NumberedGroup):
            nodes.append(_render_numbered_group(unit))
        else:
            nodes.extend(_render_safely(unit, handler_for(unit.kind)))
    return nodes


def format_export_date(day: date) -> str:
    """Format like ``October 18, 2026``."""
    return f"{day:%B} {day.day}, {day.year}"


def footer_text(exported_on: date, generator: str = DEFAULT_GENERATOR) -> str:
    return f"Exported on {format_export_date(exported_on)} • Generated by {generator}"


def render(
    blocks: Sequence[Block],
    title: str,
    *,
    exported_on: date | None = None,
    generator: str = DEFAULT_GENERATOR,
) -> RenderedDocument:
    """Assemble the output tree for ``blocks``.

    Parameters
    ----------
    blocks:
        Sanitized document blocks. May be empty; the title is still emitted.
    title:
        Text of the leading title node.
    exported_on:
        Date stamped into the footer (defaults to today).
    generator:
        Application name stamped into the footer.
    """
    day = exported_on or date.today()
    title_node = OutputNode(
        role=NodeRole.TITLE,
        level=1,
        style=dict(styles.TITLE),
        runs=[TextRun(text=title)],
    )
    footer_node = OutputNode(
        role=NodeRole.FOOTER,
        style=dict(styles.FOOTER),
        runs=[TextRun(text=footer_text(day, generator))],
        fixed=True,
    )
    output_nodes = render_blocks(blocks)
    logger.debug("Rendered %d blocks into %d output nodes", len(blocks), len(output_nodes))
    return RenderedDocument(
        title_node=title_node, output_nodes=output_nodes, footer_node=footer_node
    )


__all__ = [
    "DEFAULT_GENERATOR",
    "ERROR_PLACEHOLDER",
    "NumberedGroup",
    "footer_text",
    "format_export_date",
    "group_blocks",
    "handler_for",
    "render",
    "render_blocks",
    "render_inline",
    "resolve_span_style",
]
