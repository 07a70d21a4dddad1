"""
Block Document Model.

A document is an ordered sequence of :class:`Block` nodes. Each block carries
a type tag, a flat property bag of primitives, optional inline content, and
optional child blocks (structural nesting such as sub-lists).

Inline content is a sequence of:

- :class:`TextSpan`: a run of text with optional boolean style flags.
- :class:`LinkSpan`: a hyperlink wrapping its own inline sequence.
- a block-shaped node (any other ``type``), kept as a nested :class:`Block`.

The property bag is restricted to primitives. A project card therefore keeps
its nested sub-document as an *encoded string* (``nestedContent``); see
:mod:`blockfolio.core.blocks.codec` for the encode/decode boundary.

Instances are normally produced by :func:`blockfolio.core.blocks.sanitizer.sanitize`,
which turns arbitrary decoded JSON into conforming models.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

# ---- Shared small types ------------------------------------------------------

#: A property-bag value. Nested objects, arrays, and callables are never stored.
PropValue = str | bool | int | float | None

#: Inline style flags understood by the export pipeline.
STYLE_FLAGS: tuple[str, ...] = ("bold", "italic", "underline", "strikethrough", "code")

DEFAULT_CARD_TITLE = "New Project"
DEFAULT_CARD_SUBTEXT = "Project description"


class BlockType(StrEnum):
    """Closed set of block variants, plus the ``UNKNOWN`` catch-all."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    BULLET_LIST_ITEM = "bulletListItem"
    NUMBERED_LIST_ITEM = "numberedListItem"
    IMAGE = "image"
    CODE_BLOCK = "codeBlock"
    QUOTE = "quote"
    DIVIDER = "divider"
    PROJECT_CARD = "projectCard"
    UNKNOWN = "unknown"


# ---- Inline content ----------------------------------------------------------


class TextSpan(BaseModel):
    """One run of text. Absent or empty ``styles`` means no styling."""

    type: Literal["text"] = "text"
    text: str = ""
    styles: dict[str, bool] = Field(default_factory=dict)

    def has_style(self, flag: str) -> bool:
        """Return True only when ``flag`` is explicitly set to ``True``."""
        return self.styles.get(flag) is True


class LinkSpan(BaseModel):
    """A hyperlink around nested inline content."""

    type: Literal["link"] = "link"
    href: str | None = None
    content: list[InlineNode] = Field(default_factory=list)


def _inline_tag(value: Any) -> str:
    """Route an inline node to its model by ``type`` (dicts or instances)."""
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if kind == "text":
        return "text"
    if kind == "link":
        return "link"
    return "block"


InlineNode = Annotated[
    Union[
        Annotated[TextSpan, Tag("text")],
        Annotated[LinkSpan, Tag("link")],
        Annotated["Block", Tag("block")],
    ],
    Discriminator(_inline_tag),
]


# ---- Blocks ------------------------------------------------------------------


class Block(BaseModel):
    """A node of the document tree."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = Field(default=None, description="Opaque id assigned by the editing surface.")
    type: str = Field(..., min_length=1, description="Raw block type tag.")
    props: dict[str, PropValue] = Field(default_factory=dict)
    content: list[InlineNode] = Field(default_factory=list)
    children: list[Block] = Field(default_factory=list)

    @property
    def kind(self) -> BlockType:
        """The block variant; unrecognised type strings map to ``UNKNOWN``."""
        try:
            return BlockType(self.type)
        except ValueError:
            return BlockType.UNKNOWN

    def prop(self, name: str, default: PropValue = None) -> PropValue:
        """Return ``props[name]`` or ``default`` when the key is missing."""
        return self.props.get(name, default)


LinkSpan.model_rebuild()
Block.model_rebuild()


class ProjectCardProps(BaseModel):
    """Typed view over a project card's property bag."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = DEFAULT_CARD_TITLE
    subtext: str = DEFAULT_CARD_SUBTEXT
    cover_image: str = Field(default="", alias="coverImage")
    nested_content: str = Field(
        default="", alias="nestedContent", description="Encoded nested block document."
    )

    @classmethod
    def from_block(cls, block: Block) -> ProjectCardProps:
        """Read the card fields from ``block.props``, ignoring non-string values."""
        names = ("title", "subtext", "coverImage", "nestedContent")
        values = {k: v for k, v in block.props.items() if k in names and isinstance(v, str)}
        return cls.model_validate(values)

    def as_props(self) -> dict[str, PropValue]:
        """Return the fields under their property-bag names."""
        return dict(self.model_dump(by_alias=True))


def new_project_card() -> Block:
    """Return a fresh project card with default props (the insert command)."""
    return Block(type=BlockType.PROJECT_CARD.value, props=ProjectCardProps().as_props())


def default_document() -> list[Block]:
    """Return the content a brand new document starts with."""
    return [
        Block(
            type=BlockType.PARAGRAPH.value,
            content=[TextSpan(text="Press '/' and type: project")],
        ),
        Block(type=BlockType.PARAGRAPH.value),
    ]


__all__ = [
    "Block",
    "BlockType",
    "InlineNode",
    "LinkSpan",
    "PropValue",
    "ProjectCardProps",
    "STYLE_FLAGS",
    "TextSpan",
    "DEFAULT_CARD_TITLE",
    "DEFAULT_CARD_SUBTEXT",
    "default_document",
    "new_project_card",
]
