"""
Content sanitizer: arbitrary input -> validated block sequence.

Documents arrive from places the core does not control: the live editing
surface, persisted storage, decoded ``nestedContent`` strings, HTTP payloads.
:func:`sanitize` converts any such value into a list of conforming
:class:`~blockfolio.core.contracts.block.Block` models and never raises.

Two passes
----------
1. :func:`to_plain_data` mirrors a JSON round-trip: mappings, sequences and
   primitives survive; internal keys (``__`` prefix) and values JSON cannot
   carry are dropped (or become ``None`` inside sequences, as JSON does).
2. Per-node validation keeps only mappings with a non-empty string ``type``
   and copies a selective set of fields:

   - ``id`` when present,
   - ``content`` coerced to a list (a bare string becomes one text span),
   - ``children`` sanitized recursively, non-block entries dropped,
   - ``props`` key-by-key, keeping primitive values only.

The result is a fixed point: ``sanitize(sanitize(x)) == sanitize(x)``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from blockfolio.core.contracts.block import Block, LinkSpan, TextSpan

#: Keys starting with this prefix are internal to the producer and never kept.
RESERVED_PREFIX = "__"

#: Nodes nested deeper than this are cut (keeps recursion bounded).
MAX_DEPTH = 64

# Sentinel for values a JSON round-trip would drop.
_DROP = object()


# --------------------------------------------------------------------------- #
# Pass 1: plain data
# --------------------------------------------------------------------------- #


def to_plain_data(value: Any) -> Any:
    """Return the JSON-round-trip equivalent of ``value``.

    Unsupported top-level values become ``None``.
    """
    plain = _plain(value, set(), 0)
    return None if plain is _DROP else plain


def _plain(value: Any, active: set[int], depth: int) -> Any:
    if value is None or isinstance(value, bool | int | str):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, datetime | date):
        return value.isoformat()
    if depth > MAX_DEPTH:
        return _DROP
    if hasattr(value, "model_dump") and not isinstance(value, type):
        try:
            value = value.model_dump(mode="json")
        except Exception:  # a broken model is just unsupported input
            return _DROP
    if isinstance(value, Mapping | list | tuple):
        marker = id(value)
        if marker in active:
            return _DROP
        active.add(marker)
        try:
            if isinstance(value, Mapping):
                return _plain_mapping(value, active, depth)
            items = (_plain(v, active, depth + 1) for v in value)
            return [None if item is _DROP else item for item in items]
        finally:
            active.discard(marker)
    return _DROP


def _plain_mapping(value: Mapping[Any, Any], active: set[int], depth: int) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for raw_key, raw_value in value.items():
        if isinstance(raw_key, str):
            key = raw_key
        elif isinstance(raw_key, bool | int | float) or raw_key is None:
            key = _json_key(raw_key)
        else:
            continue
        if key.startswith(RESERVED_PREFIX):
            continue
        item = _plain(raw_value, active, depth + 1)
        if item is not _DROP:
            out[key] = item
    return out


def _json_key(key: bool | int | float | None) -> str:
    """Stringify a non-string mapping key the way ``json.dumps`` does."""
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    return repr(key) if isinstance(key, float) else str(key)


# --------------------------------------------------------------------------- #
# Pass 2: node validation
# --------------------------------------------------------------------------- #


def _is_node(value: Any) -> bool:
    """A candidate node is a mapping with a non-empty string ``type``."""
    return isinstance(value, dict) and isinstance(value.get("type"), str) and bool(value["type"])


def _clean_props(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        return {}
    return {k: v for k, v in raw.items() if v is None or isinstance(v, str | bool | int | float)}


def _clean_styles(raw: Any) -> dict[str, bool]:
    if not isinstance(raw, dict):
        return {}
    return {k: v for k, v in raw.items() if isinstance(v, bool)}


def _clean_inline(raw: Any, depth: int) -> list[dict[str, Any]]:
    """Coerce a ``content`` value into a list of inline node dicts."""
    if isinstance(raw, str):
        return [{"type": "text", "text": raw, "styles": {}}]
    if not isinstance(raw, list) or depth > MAX_DEPTH:
        return []
    out: list[dict[str, Any]] = []
    for item in raw:
        if isinstance(item, str):
            out.append({"type": "text", "text": item, "styles": {}})
        elif not _is_node(item):
            continue
        elif item["type"] == "text":
            text = item.get("text")
            out.append(
                {
                    "type": "text",
                    "text": text if isinstance(text, str) else "",
                    "styles": _clean_styles(item.get("styles")),
                }
            )
        elif item["type"] == "link":
            href = item.get("href")
            out.append(
                {
                    "type": "link",
                    "href": href if isinstance(href, str) else None,
                    "content": _clean_inline(item.get("content"), depth + 1),
                }
            )
        else:
            out.append(_clean_node(item, depth + 1))
    return out


def _clean_node(node: dict[str, Any], depth: int) -> dict[str, Any]:
    clean: dict[str, Any] = {"type": node["type"]}
    raw_id = node.get("id")
    if isinstance(raw_id, str):
        clean["id"] = raw_id
    elif isinstance(raw_id, int | float) and not isinstance(raw_id, bool):
        clean["id"] = str(raw_id)
    clean["props"] = _clean_props(node.get("props"))
    clean["content"] = _clean_inline(node.get("content"), depth)
    clean["children"] = _clean_nodes(node.get("children"), depth + 1)
    return clean


def _clean_nodes(raw: Any, depth: int) -> list[dict[str, Any]]:
    if not isinstance(raw, list) or depth > MAX_DEPTH:
        return []
    return [_clean_node(item, depth) for item in raw if _is_node(item)]


def sanitize(raw: Any) -> list[Block]:
    """Convert ``raw`` into a validated block sequence.

    Parameters
    ----------
    raw:
        Anything: decoded JSON, model instances, ``None``, garbage.

    Returns
    -------
    list[Block]
        The accepted blocks in input order; ``[]`` when nothing qualifies.
        An empty result means "nothing to export", not an error.
    """
    plain = to_plain_data(raw)
    blocks: list[Block] = []
    for node in _clean_nodes(plain, 0):
        blocks.append(_to_model(node))
    return blocks


def _to_model(node: dict[str, Any]) -> Block:
    """Build models directly from cleaned dicts (no re-validation needed)."""
    return Block(
        id=node.get("id"),
        type=node["type"],
        props=node["props"],
        content=[_inline_model(item) for item in node["content"]],
        children=[_to_model(child) for child in node["children"]],
    )


def _inline_model(item: dict[str, Any]) -> TextSpan | LinkSpan | Block:
    if item["type"] == "text":
        return TextSpan(text=item["text"], styles=item["styles"])
    if item["type"] == "link":
        return LinkSpan(
            href=item["href"],
            content=[_inline_model(child) for child in item["content"]],
        )
    return _to_model(item)


__all__ = ["sanitize", "to_plain_data", "RESERVED_PREFIX", "MAX_DEPTH"]
