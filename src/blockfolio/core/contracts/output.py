"""
Output node contracts produced by the export rendering pipeline.

An :class:`OutputNode` is a styled box or text run tagged with a layout role.
Inline styling is already flattened into presentation attributes
(``StyleMap``), so a page-layout renderer only has to map attribute names to
its own primitives. Nodes are created fresh per export and never persisted.

Presentation attribute names are snake_case (``font_size``, ``margin_bottom``,
``text_decoration`` ...). Colors are hex strings; lengths are points.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

StyleMap = dict[str, str | int | float]


class NodeRole(StrEnum):
    """Layout role of an output node."""

    TITLE = "title"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    SPACER = "spacer"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    IMAGE = "image"
    CAPTION = "caption"
    CODE_BLOCK = "code_block"
    QUOTE = "quote"
    DIVIDER = "divider"
    CARD = "card"
    CARD_TITLE = "card_title"
    CARD_CONTENT = "card_content"
    PLACEHOLDER = "placeholder"
    FOOTER = "footer"


class TextRun(BaseModel):
    """A run of text with resolved presentation attributes."""

    kind: Literal["text"] = "text"
    text: str
    style: StyleMap = Field(default_factory=dict)


class LinkRun(BaseModel):
    """A hyperlink affordance wrapping resolved runs."""

    kind: Literal["link"] = "link"
    href: str = "#"
    style: StyleMap = Field(default_factory=dict)
    runs: list[InlineRun] = Field(default_factory=list)


InlineRun = Annotated[TextRun | LinkRun, Field(discriminator="kind")]


def runs_text(runs: list[TextRun | LinkRun]) -> str:
    """Flatten runs to their plain text."""
    parts: list[str] = []
    for run in runs:
        if isinstance(run, TextRun):
            parts.append(run.text)
        else:
            parts.append(runs_text(run.runs))
    return "".join(parts)


class OutputNode(BaseModel):
    """A render-ready unit handed to the page-layout renderer.

    Attributes
    ----------
    role:
        Layout role of the node.
    style:
        Resolved container presentation attributes.
    runs:
        Inline text runs (empty for pure containers, images, rules).
    children:
        Nested nodes (list bodies, card sections, captions).
    level:
        Heading level 1-3 for ``HEADING`` nodes.
    marker:
        Bullet ("•") or ordinal ("3.") for ``LIST_ITEM`` nodes.
    src:
        Image source for ``IMAGE`` nodes.
    block_type:
        Raw type of the source block, when the node stems from one.
    fixed:
        Ask the renderer to repeat this node on every page.
    """

    role: NodeRole
    style: StyleMap = Field(default_factory=dict)
    runs: list[InlineRun] = Field(default_factory=list)
    children: list[OutputNode] = Field(default_factory=list)
    level: int | None = Field(default=None, ge=1, le=3)
    marker: str | None = None
    src: str | None = None
    block_type: str | None = None
    fixed: bool = False

    @property
    def text(self) -> str:
        """Plain text of this node's own runs."""
        return runs_text(self.runs)


class RenderedDocument(BaseModel):
    """The assembled tree: title first, content nodes, pinned footer."""

    title_node: OutputNode
    output_nodes: list[OutputNode] = Field(default_factory=list)
    footer_node: OutputNode


class DocumentInfo(BaseModel):
    """Document-level metadata written into the exported artifact."""

    title: str
    author: str = ""
    subject: str = ""
    keywords: str = ""


LinkRun.model_rebuild()
OutputNode.model_rebuild()

__all__ = [
    "DocumentInfo",
    "InlineRun",
    "LinkRun",
    "NodeRole",
    "OutputNode",
    "RenderedDocument",
    "StyleMap",
    "TextRun",
    "runs_text",
]
