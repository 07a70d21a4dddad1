"""
Presentation constants for exported documents.

Every value is a flat :data:`~blockfolio.core.contracts.output.StyleMap`
(snake_case attribute names, points, hex colors). The export pipeline copies
these into output nodes; the page-layout renderer interprets them.
"""

from __future__ import annotations

from blockfolio.core.contracts.output import StyleMap

PAGE: StyleMap = {
    "padding": 40,
    "font_family": "Helvetica",
    "font_size": 12,
    "page_size": "A4",
}

# ---- Headings ---------------------------------------------------------------

HEADING_1: StyleMap = {
    "font_size": 24,
    "font_weight": "bold",
    "margin_bottom": 16,
    "margin_top": 24,
    "color": "#1a1a1a",
}
HEADING_2: StyleMap = {
    "font_size": 20,
    "font_weight": "bold",
    "margin_bottom": 12,
    "margin_top": 20,
    "color": "#2a2a2a",
}
HEADING_3: StyleMap = {
    "font_size": 16,
    "font_weight": "bold",
    "margin_bottom": 10,
    "margin_top": 16,
    "color": "#3a3a3a",
}
HEADINGS: dict[int, StyleMap] = {1: HEADING_1, 2: HEADING_2, 3: HEADING_3}

TITLE: StyleMap = {**HEADING_1, "margin_top": 0, "margin_bottom": 24}

# ---- Body -------------------------------------------------------------------

PARAGRAPH: StyleMap = {
    "font_size": 12,
    "line_height": 1.6,
    "margin_bottom": 8,
    "color": "#4a4a4a",
    "text_align": "justify",
}
SPACER: StyleMap = {"height": 8}

LIST: StyleMap = {"margin_bottom": 8, "margin_left": 20}
LIST_ITEM: StyleMap = {"margin_bottom": 4, "padding_left": 0}
BULLET: StyleMap = {"width": 15, "font_size": 12, "color": "#4a4a4a"}
LIST_ITEM_CONTENT: StyleMap = {"font_size": 12, "line_height": 1.6, "color": "#4a4a4a"}
NESTED_LIST: StyleMap = {"margin_left": 20, "margin_top": 4}

IMAGE: StyleMap = {"max_width": 515, "max_height": 300, "margin_vertical": 12}
CAPTION: StyleMap = {
    "font_size": 10,
    "color": "#6b7280",
    "text_align": "center",
    "margin_top": 4,
}

CODE_BLOCK: StyleMap = {
    "background_color": "#f5f5f5",
    "font_family": "Courier",
    "font_size": 10,
    "padding": 12,
    "border_width": 1,
    "border_color": "#e0e0e0",
    "margin_vertical": 8,
}

QUOTE: StyleMap = {
    "border_left_width": 4,
    "border_left_color": "#3b82f6",
    "padding_left": 16,
    "font_style": "italic",
    "color": "#6b7280",
    "margin_vertical": 8,
}

DIVIDER: StyleMap = {"height": 1, "color": "#e5e7eb", "margin_vertical": 16}

# ---- Project card -----------------------------------------------------------

CARD: StyleMap = {
    "border_width": 1,
    "border_color": "#d1d5db",
    "border_radius": 8,
    "padding": 16,
    "margin_vertical": 12,
    "background_color": "#f9fafb",
}
CARD_TITLE: StyleMap = {
    "font_size": 18,
    "font_weight": "bold",
    "color": "#1f2937",
    "margin_bottom": 8,
}
CARD_IMAGE: StyleMap = {"max_width": 483, "max_height": 200, "margin_vertical": 8}
CARD_CONTENT: StyleMap = {"font_size": 11, "color": "#4b5563", "margin_top": 8}

# ---- Inline -----------------------------------------------------------------

BOLD: StyleMap = {"font_weight": "bold"}
ITALIC: StyleMap = {"font_style": "italic"}
UNDERLINE: StyleMap = {"text_decoration": "underline"}
STRIKETHROUGH: StyleMap = {"text_decoration": "line-through"}
INLINE_CODE: StyleMap = {
    "font_family": "Courier",
    "background_color": "#f5f5f5",
    "font_size": 10,
}
LINK: StyleMap = {"color": "#3b82f6", "text_decoration": "underline"}

PLACEHOLDER: StyleMap = {"font_size": 10, "color": "#ef4444", "font_style": "italic"}

FOOTER: StyleMap = {
    "font_size": 10,
    "color": "#9ca3af",
    "text_align": "center",
    "border_top_width": 1,
    "border_top_color": "#e5e7eb",
    "padding_top": 10,
    "bottom": 30,
}

#: Inline flags in application order; later entries win on a shared channel.
INLINE_FLAGS: tuple[tuple[str, StyleMap], ...] = (
    ("bold", BOLD),
    ("italic", ITALIC),
    ("underline", UNDERLINE),
    ("strikethrough", STRIKETHROUGH),
    ("code", INLINE_CODE),
)

__all__ = [
    "BOLD",
    "BULLET",
    "CAPTION",
    "CARD",
    "CARD_CONTENT",
    "CARD_IMAGE",
    "CARD_TITLE",
    "CODE_BLOCK",
    "DIVIDER",
    "FOOTER",
    "HEADINGS",
    "HEADING_1",
    "HEADING_2",
    "HEADING_3",
    "IMAGE",
    "INLINE_CODE",
    "INLINE_FLAGS",
    "ITALIC",
    "LINK",
    "LIST",
    "LIST_ITEM",
    "LIST_ITEM_CONTENT",
    "NESTED_LIST",
    "PAGE",
    "PARAGRAPH",
    "PLACEHOLDER",
    "QUOTE",
    "SPACER",
    "STRIKETHROUGH",
    "TITLE",
    "UNDERLINE",
]
