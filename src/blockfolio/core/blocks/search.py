"""Read-only traversals over the block model."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from blockfolio.core.contracts.block import Block, BlockType, LinkSpan, TextSpan


def find_first_image(nodes: Iterable[Any]) -> str:
    """Return the URL of the first image block, or ``""``.

    Depth-first, left-to-right over the ``content`` axis only: a node's
    ``children`` are never searched. A block qualifies when it is an image
    with a non-empty string ``url`` prop.
    """
    for node in nodes:
        if isinstance(node, Block) and node.kind is BlockType.IMAGE:
            url = node.prop("url")
            if isinstance(url, str) and url:
                return url
        content = getattr(node, "content", None)
        if isinstance(content, list) and content:
            nested = find_first_image(content)
            if nested:
                return nested
    return ""


def extract_text(content: Any) -> str:
    """Flatten inline content to plain text, without separators."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    parts: list[str] = []
    for item in content:
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, TextSpan):
            parts.append(item.text)
        elif isinstance(item, LinkSpan | Block):
            parts.append(extract_text(item.content))
    return "".join(parts)


__all__ = ["extract_text", "find_first_image"]
