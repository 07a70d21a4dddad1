"""
Encode/decode boundary for nested block documents.

A project card keeps its sub-document inside the primitive-only property bag
as a JSON string (``nestedContent``). Decoding that string is always allowed
to fail: callers get a :class:`~blockfolio.core.result.Result` and decide how
to degrade (the synchronizer falls back to a skeleton, the exporter treats
the nested document as absent).
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from blockfolio.core.blocks.sanitizer import sanitize, to_plain_data
from blockfolio.core.contracts.block import Block, BlockType
from blockfolio.core.result import Result, err, ok
from blockfolio.core.settings import get_logger

logger = get_logger(__name__)

DEFAULT_NESTED_TITLE = "Project Title"
DEFAULT_NESTED_BODY = "Start writing project details here..."


def encode_document(blocks: Sequence[Block]) -> str:
    """Serialize ``blocks`` to the encoded string form."""
    payload = to_plain_data(list(blocks))
    return json.dumps(payload, ensure_ascii=False)


def decode_document(encoded: Any) -> Result[list[Block], str]:
    """Decode an encoded nested document.

    Returns
    -------
    Result[list[Block], str]
        ``Err`` when ``encoded`` is not a non-blank string, is not valid JSON,
        or does not decode to an array. Otherwise ``Ok`` with the sanitized
        blocks (possibly empty).
    """
    if not isinstance(encoded, str) or not encoded.strip():
        return err("nested document is empty")
    return (
        _parse_json(encoded)
        .map_err(lambda reason: f"nested document is not valid JSON: {reason}")
        .flat_map(_require_array)
        .map(sanitize)
    )


def _parse_json(text: str) -> Result[Any, str]:
    try:
        return ok(json.loads(text))
    except ValueError as exc:
        return err(str(exc))


def _require_array(payload: Any) -> Result[list[Any], str]:
    if isinstance(payload, list):
        return ok(payload)
    return err(f"nested document is not an array (got {type(payload).__name__})")


def default_nested_content(title: str | None) -> list[Block]:
    """Return the two-block skeleton a new nested document starts with."""
    return sanitize(
        [
            {"type": BlockType.HEADING.value, "content": title or DEFAULT_NESTED_TITLE},
            {"type": BlockType.PARAGRAPH.value, "content": DEFAULT_NESTED_BODY},
        ]
    )


def initial_nested_content(props: Mapping[str, Any]) -> list[Block]:
    """Decode a card's ``nestedContent`` or fall back to the skeleton.

    Decode failures and empty documents are not fatal; a warning is logged and
    the skeleton (seeded with the card title) is returned instead.
    """
    title = props.get("title")
    title = title if isinstance(title, str) else None

    encoded = props.get("nestedContent")
    if not isinstance(encoded, str) or not encoded.strip():
        return default_nested_content(title)

    decoded = decode_document(encoded)
    if decoded.is_err():
        logger.warning("Failed to decode nested content, using default: %s", decoded.unwrap_err())
        return default_nested_content(title)

    blocks = decoded.unwrap()
    if not blocks:
        logger.warning("Nested content holds no blocks, using default")
        return default_nested_content(title)
    return blocks


__all__ = [
    "decode_document",
    "default_nested_content",
    "encode_document",
    "initial_nested_content",
]
