"""
ReportLab page-layout renderer.

Maps a :class:`~blockfolio.core.contracts.output.RenderedDocument` onto
reportlab platypus flowables and builds a PDF in memory:

- text roles become :class:`Paragraph` objects with inline markup
  (``<b>``, ``<i>``, ``<u>``, ``<strike>``, ``<font>``, ``<a>``);
- list items are bulleted paragraphs; nesting becomes a left indent;
- quotes are paragraphs with a left accent bar;
- cards are bordered tables with one row per child flowable;
- code blocks are :class:`Preformatted` boxes;
- the footer node is drawn on every page by the page callbacks.

Layout is synchronous CPU work, so :meth:`ReportLabRenderer.render` runs it
in a worker thread.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from io import BytesIO
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import (
    Flowable,
    HRFlowable,
    Image,
    Paragraph,
    Preformatted,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from blockfolio.core.contracts.output import (
    DocumentInfo,
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

_ALIGNMENTS = {"center": TA_CENTER, "justify": TA_JUSTIFY, "left": TA_LEFT}
_TEXT_ROLES = {
    NodeRole.TITLE,
    NodeRole.HEADING,
    NodeRole.PARAGRAPH,
    NodeRole.CARD_TITLE,
    NodeRole.CAPTION,
    NodeRole.PLACEHOLDER,
}


# --------------------------------------------------------------------------- #
# Style & markup helpers
# --------------------------------------------------------------------------- #


def _num(style: StyleMap, key: str, default: float = 0.0) -> float:
    value = style.get(key, default)
    return float(value) if isinstance(value, int | float) else default


def _font_name(style: StyleMap, family: str = "Helvetica") -> str:
    family = str(style.get("font_family", family))
    bold = style.get("font_weight") == "bold"
    italic = style.get("font_style") == "italic"
    if bold and italic:
        return f"{family}-BoldOblique"
    if bold:
        return f"{family}-Bold"
    if italic:
        return f"{family}-Oblique"
    return family


def paragraph_style(name: str, style: StyleMap, **overrides: Any) -> ParagraphStyle:
    """Build a :class:`ParagraphStyle` from a presentation attribute map."""
    size = _num(style, "font_size", _num(styles.PAGE, "font_size", 12))
    leading = size * _num(style, "line_height", 1.25)
    params: dict[str, Any] = {
        "fontName": _font_name(style),
        "fontSize": size,
        "leading": leading,
        "textColor": colors.HexColor(str(style.get("color", "#000000"))),
        "alignment": _ALIGNMENTS.get(str(style.get("text_align", "left")), TA_LEFT),
        "spaceBefore": _num(style, "margin_top"),
        "spaceAfter": _num(style, "margin_bottom"),
    }
    params.update(overrides)
    return ParagraphStyle(name, **params)


def _attr(value: str) -> str:
    return escape(value, {'"': "&quot;"})


def _wrap_run(text: str, style: StyleMap) -> str:
    if style.get("font_family") == "Courier":
        background = _attr(str(style.get("background_color", "#f5f5f5")))
        size = _num(style, "font_size", 10)
        text = f'<font face="Courier" size="{size:g}" backColor="{background}">{text}</font>'
    decoration = style.get("text_decoration")
    if decoration == "underline":
        text = f"<u>{text}</u>"
    elif decoration == "line-through":
        text = f"<strike>{text}</strike>"
    if style.get("font_style") == "italic":
        text = f"<i>{text}</i>"
    if style.get("font_weight") == "bold":
        text = f"<b>{text}</b>"
    return text


def runs_markup(runs: Sequence[TextRun | LinkRun]) -> str:
    """Convert resolved runs into reportlab paragraph markup."""
    parts: list[str] = []
    for run in runs:
        if isinstance(run, TextRun):
            text = escape(run.text).replace("\n", "<br/>")
            parts.append(_wrap_run(text, run.style))
        else:
            color = _attr(str(run.style.get("color", "#3b82f6")))
            inner = _wrap_run(runs_markup(run.runs), run.style)
            parts.append(f'<a href="{_attr(run.href)}" color="{color}">{inner}</a>')
    return "".join(parts)


def _pad(flowable: Flowable, width: float, indent: float) -> Flowable:
    """Shift a fixed-height flowable right by ``indent`` points."""
    if indent <= 0:
        return flowable
    table = Table([[flowable]], colWidths=[width])
    table.setStyle(
        TableStyle(
            [
                ("LEFTPADDING", (0, 0), (-1, -1), indent),
                ("RIGHTPADDING", (0, 0), (-1, -1), 0),
                ("TOPPADDING", (0, 0), (-1, -1), 0),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 0),
            ]
        )
    )
    return table


class AccentParagraph(Paragraph):  # type: ignore[misc]
    """Paragraph with a vertical bar along its left edge.

    The bar is read from ``style.accent_bar`` (``x, width, color``) so the
    halves produced by a page split keep drawing it.
    """

    def draw(self) -> None:
        bar = getattr(self.style, "accent_bar", None)
        if bar is not None:
            x, bar_width, color = bar
            self.canv.saveState()
            self.canv.setStrokeColor(color)
            self.canv.setLineWidth(bar_width)
            self.canv.line(x, 0, x, self.height)
            self.canv.restoreState()
        super().draw()



# --------------------------------------------------------------------------- #
# Renderer
# --------------------------------------------------------------------------- #


class ReportLabRenderer:
    """:class:`~blockfolio.pipelines.export_flow.PageLayoutRenderer` backed by reportlab.

    Parameters
    ----------
    page_size:
        ``(width, height)`` in points; A4 by default.
    margin:
        Page margin in points.
    """

    def __init__(self, page_size: tuple[float, float] = A4, margin: float | None = None) -> None:
        self.page_size = page_size
        self.margin = margin if margin is not None else _num(styles.PAGE, "padding", 40)

    @property
    def frame_width(self) -> float:
        return self.page_size[0] - 2 * self.margin

    async def render(self, document: RenderedDocument, info: DocumentInfo) -> bytes:
        """Lay out ``document`` in a worker thread and return the PDF bytes."""
        return await asyncio.to_thread(self.render_sync, document, info)

    def render_sync(self, document: RenderedDocument, info: DocumentInfo) -> bytes:
        buffer = BytesIO()
        footer_bottom = _num(document.footer_node.style, "bottom", 30)
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.page_size,
            leftMargin=self.margin,
            rightMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=max(self.margin, footer_bottom + 30),
            title=info.title,
            author=info.author,
            subject=info.subject,
            keywords=info.keywords,
        )
        story: list[Flowable] = self.flowables(document.title_node, self.frame_width)
        for node in document.output_nodes:
            story.extend(self.flowables(node, self.frame_width))

        def draw_footer(canvas: Canvas, _doc: Any) -> None:
            self._draw_footer(canvas, document.footer_node)

        doc.build(story, onFirstPage=draw_footer, onLaterPages=draw_footer)
        return buffer.getvalue()

    def _draw_footer(self, canvas: Canvas, node: OutputNode) -> None:
        style = node.style
        width = self.page_size[0]
        bottom = _num(style, "bottom", 30)
        canvas.saveState()
        canvas.setStrokeColor(colors.HexColor(str(style.get("border_top_color", "#e5e7eb"))))
        canvas.setLineWidth(_num(style, "border_top_width", 1))
        top = bottom + _num(style, "padding_top", 10) + _num(style, "font_size", 10)
        canvas.line(self.margin, top, width - self.margin, top)
        canvas.setFillColor(colors.HexColor(str(style.get("color", "#9ca3af"))))
        canvas.setFont(_font_name(style), _num(style, "font_size", 10))
        canvas.drawCentredString(width / 2, bottom, node.text)
        canvas.restoreState()

    # ------------------------------- Node mapping ---------------------------

    # ------------------------------- Node mapping ---------------------------
    #
    # Every container is flattened into a run of page-splittable flowables:
    # nesting is expressed with left indents, and cards are tables with one
    # row per child flowable so they break between rows.

    def flowables(self, node: OutputNode, width: float, indent: float = 0.0) -> list[Flowable]:
        """Map one output node (and its subtree) to flowables.

        ``width`` is the available width and ``indent`` the left offset of
        the node inside it.
        """
        role = node.role
        if role in _TEXT_ROLES:
            pstyle = paragraph_style(role.value, node.style, leftIndent=indent)
            out: list[Flowable] = [Paragraph(runs_markup(node.runs), pstyle)]
            for child in node.children:
                out.extend(self.flowables(child, width, indent))
            return out
        if role is NodeRole.SPACER:
            return [Spacer(1, _num(node.style, "height", 8))]
        if role is NodeRole.DIVIDER:
            margin = _num(node.style, "margin_vertical", 16)
            rule = HRFlowable(
                width=width - indent,
                thickness=_num(node.style, "height", 1),
                color=colors.HexColor(str(node.style.get("color", "#e5e7eb"))),
            )
            return [Spacer(1, margin), _pad(rule, width, indent), Spacer(1, margin)]
        if role is NodeRole.IMAGE:
            return self._image(node, width, indent)
        if role is NodeRole.CODE_BLOCK:
            return [self._code(node, indent)]
        if role is NodeRole.QUOTE:
            return [self._quote(node, indent)]
        if role is NodeRole.ORDERED_LIST:
            return self._ordered_list(node, width, indent)
        if role is NodeRole.LIST_ITEM:
            return self._list_item(node, width, indent)
        if role is NodeRole.CARD:
            return [self._card(node, width, indent)]
        if role is NodeRole.CARD_CONTENT:
            out = [Spacer(1, _num(node.style, "margin_top", 8))]
            for child in node.children:
                out.extend(self.flowables(child, width, indent))
            return out
        # Footer is drawn by the page callbacks.
        return []

    def _image(self, node: OutputNode, width: float, indent: float) -> list[Flowable]:
        src = node.src or ""
        margin = _num(node.style, "margin_vertical", 12)
        max_w = min(width - indent, _num(node.style, "max_width", width))
        max_h = _num(node.style, "max_height", 300)
        out: list[Flowable] = []
        try:
            img_w, img_h = ImageReader(src).getSize()
            scale = min(max_w / img_w, max_h / img_h, 1.0)
            image = Image(src, width=img_w * scale, height=img_h * scale)
            image.hAlign = "LEFT"
            out.extend([Spacer(1, margin), _pad(image, width, indent), Spacer(1, margin)])
        except Exception as exc:
            logger.warning("Could not load image %s: %s", src, exc)
            fallback = paragraph_style(
                "image-fallback", styles.CAPTION, alignment=TA_LEFT, leftIndent=indent
            )
            out.append(Paragraph(f"[image: {escape(src)}]", fallback))
        for child in node.children:
            out.extend(self.flowables(child, width, indent))
        return out

    def _code(self, node: OutputNode, indent: float) -> Flowable:
        style = node.style
        padding = _num(style, "padding", 12)
        margin = _num(style, "margin_vertical", 8)
        pstyle = paragraph_style(
            "code",
            style,
            fontName="Courier",
            backColor=colors.HexColor(str(style.get("background_color", "#f5f5f5"))),
            borderColor=colors.HexColor(str(style.get("border_color", "#e0e0e0"))),
            borderWidth=_num(style, "border_width", 1),
            borderPadding=padding,
            leftIndent=indent + padding,
            rightIndent=padding,
            spaceBefore=margin + padding,
            spaceAfter=margin + padding,
        )
        return Preformatted(node.text, pstyle)

    def _quote(self, node: OutputNode, indent: float) -> Flowable:
        style = node.style
        bar_width = _num(style, "border_left_width", 4)
        margin = _num(style, "margin_vertical", 8)
        pstyle = paragraph_style(
            "quote",
            style,
            leftIndent=indent + bar_width + _num(style, "padding_left", 16),
            spaceBefore=margin,
            spaceAfter=margin,
        )
        accent = colors.HexColor(str(style.get("border_left_color", "#3b82f6")))
        pstyle.accent_bar = (indent + bar_width / 2, bar_width, accent)
        return AccentParagraph(runs_markup(node.runs), pstyle)

    def _ordered_list(self, node: OutputNode, width: float, indent: float) -> list[Flowable]:
        inner = indent + _num(node.style, "margin_left", 20)
        items: list[Flowable] = []
        for child in node.children:
            items.extend(self.flowables(child, width, inner))
        if not items:
            return []
        items.append(Spacer(1, _num(node.style, "margin_bottom", 8)))
        return items

    def _list_item(self, node: OutputNode, width: float, indent: float) -> list[Flowable]:
        marker_w = _num(styles.BULLET, "width", 15)
        text_style = paragraph_style(
            "list-item",
            styles.LIST_ITEM_CONTENT,
            leftIndent=indent + marker_w,
            bulletIndent=indent,
            bulletFontName=_font_name(styles.BULLET),
            bulletFontSize=_num(styles.BULLET, "font_size", 12),
            spaceAfter=_num(node.style, "margin_bottom", 4),
        )
        out: list[Flowable] = [
            Paragraph(runs_markup(node.runs), text_style, bulletText=node.marker or "")
        ]
        if node.children:
            nested = indent + marker_w + _num(styles.NESTED_LIST, "margin_left", 20)
            out.append(Spacer(1, _num(styles.NESTED_LIST, "margin_top", 4)))
            for child in node.children:
                out.extend(self.flowables(child, width, nested))
        return out

    def _card(self, node: OutputNode, width: float, indent: float) -> Flowable:
        style = node.style
        padding = _num(style, "padding", 16)
        border = _num(style, "border_width", 1)
        outer = width - indent
        inner = outer - 2 * (padding + border)
        border_color = colors.HexColor(str(style.get("border_color", "#d1d5db")))
        background = colors.HexColor(str(style.get("background_color", "#f9fafb")))
        rows: list[list[Flowable]] = []
        for child in node.children:
            rows.extend([flowable] for flowable in self.flowables(child, inner))
        if not rows:
            rows = [[Spacer(1, 0)]]
        table = Table(rows, colWidths=[outer], hAlign="RIGHT")
        table.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LEFTPADDING", (0, 0), (-1, -1), padding),
                    ("RIGHTPADDING", (0, 0), (-1, -1), padding),
                    ("TOPPADDING", (0, 0), (-1, -1), 0),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 0),
                    ("TOPPADDING", (0, 0), (-1, 0), padding),
                    ("BOTTOMPADDING", (0, -1), (-1, -1), padding),
                    ("BOX", (0, 0), (-1, -1), border, border_color),
                    ("BACKGROUND", (0, 0), (-1, -1), background),
                ]
            )
        )
        margin = _num(style, "margin_vertical", 12)
        table.spaceBefore = margin
        table.spaceAfter = margin
        return table


__all__ = ["AccentParagraph", "ReportLabRenderer", "paragraph_style", "runs_markup"]
