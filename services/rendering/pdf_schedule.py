"""
Schedule PDF renderer.

Two passes:
1. ``layout_schedule_pdf`` paginates the prepared view into pages of draw
   operations. It is pure (no canvas, no network) so pagination can be
   inspected directly.
2. ``render_schedule_pdf`` fetches the logo, runs the layout and paints the
   operations onto a ReportLab canvas.

Coordinates are PDF points with the origin bottom-left. ``y`` in the layout
pass is the top edge of the next block to be placed; text baselines sit one
font size below it.

Text is limited to printable ASCII before drawing because the standard
Helvetica fonts cannot encode anything else; other characters are dropped.
"""
import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Optional

from reportlab.pdfgen import canvas
from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader

from constants import CELL_PADDING, DEFAULT_LINE_SPACING
from services.errors import RenderError, ExternalFetchError
from services.row_formats import row_style_for, variant_spec
from services.rendering.assets import fetch_logo
from services.rendering.common import (
    PDF_FONTS,
    entry_format,
    cell_text,
    column_fractions,
    show_label_row,
    badge_field,
)
from services.rendering.markdown_render import markdown_to_lines
from utils.pdf_text import strip_unsupported, measure_text_width, wrap_text
from utils.timestamps import RenderClock

logger = logging.getLogger(__name__)

GUTTER_MARK = "| "
GUTTER_FONT = PDF_FONTS["normal"]
CONTINUED_SUFFIX = " (Continued...)"
FOOTER_LINES = 2


@dataclass
class TextOp:
    x: float
    y: float
    text: str
    font: str
    size: float
    colour: str


@dataclass
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    thickness: float
    colour: str


@dataclass
class RectOp:
    x: float
    y: float
    width: float
    height: float
    fill: str
    stroke: Optional[str] = None


@dataclass
class ImageOp:
    image: object
    x: float
    y: float
    width: float
    height: float


@dataclass
class PdfLayout:
    width: float
    height: float
    title: str
    pages: List[list] = field(default_factory=list)

    @property
    def page_count(self):
        return len(self.pages)

    def texts(self, page_index):
        return [op.text for op in self.pages[page_index] if isinstance(op, TextOp)]


@dataclass
class _TextStyle:
    font: str
    size: float
    colour: str
    line_height: float
    padding_bottom: float = 0

    @classmethod
    def from_block(cls, block, line_spacing=DEFAULT_LINE_SPACING):
        return cls(
            font=PDF_FONTS.get(block["fontStyle"], PDF_FONTS["normal"]),
            size=block["fontSize"],
            colour=block["fontColour"],
            line_height=block["fontSize"] + line_spacing,
            padding_bottom=block.get("paddingBottom", 0),
        )


def page_geometry(document):
    """
    Validate and unpack page geometry.

    Raises:
        RenderError: page size, or the space left inside the margins, is
            zero or negative
    """
    width = document["pageSize"]["width"]
    height = document["pageSize"]["height"]
    if width <= 0 or height <= 0:
        raise RenderError(f"Invalid page size {width}x{height}")

    left, right = document["leftMargin"], document["rightMargin"]
    top, bottom = document["topMargin"], document["bottomMargin"]
    if width - left - right <= 0 or height - top - bottom <= 0:
        raise RenderError(f"Margins leave no content area on a {width}x{height} page")
    return width, height, left, right, top, bottom


class _ScheduleLayout:
    """Mutable pagination state for one layout pass."""

    def __init__(self, view, styles, document, clock, key_info, logo, footer_credit):
        (self.page_width, self.page_height, self.left, self.right,
         self.top, self.bottom) = page_geometry(document)
        self.content_width = self.page_width - self.left - self.right

        self.view = view
        self.styles = styles
        self.document = document
        self.clock = clock
        self.key_info_lines = markdown_to_lines(key_info) if key_info else []
        self.logo = logo
        self.footer_credit = footer_credit or ""

        self.columns = view.get("columns") or []
        self.fractions = column_fractions(self.columns)
        self.column_widths = [self.content_width * f for f in self.fractions]
        self.show_labels = show_label_row(self.columns)
        self.badge_column = badge_field(self.columns)
        self.row_spacing = styles["row"]["lineSpacing"]

        self.header_style = _TextStyle.from_block(styles["header"])
        self.footer_style = _TextStyle.from_block(styles["footer"])
        self.title_style = _TextStyle.from_block(styles["groupTitle"])
        self.meta_style = _TextStyle.from_block(styles["groupMetadata"])
        self.label_style = _TextStyle.from_block(styles["labelRow"])
        self.key_info_style = _TextStyle.from_block(styles["keyInfo"])

        self.header_lines = [strip_unsupported(line) for line in document["header"]["text"]]
        logo_spec = document["header"]["logo"]
        self.logo_width = logo_spec["width"]
        self.logo_height = logo_spec["height"]

        self.header_height = self._header_block_height()
        self.content_top = self.page_height - self.top - self.header_height
        self.footer_limit = self.bottom + self.footer_style.line_height * FOOTER_LINES
        self.floor = max(self.footer_limit, document["bottomPageThreshold"])

        self.pages = []
        self.ops = None
        self.y = None
        self.new_page()

    # -- paging -----------------------------------------------------------

    def _has_header(self):
        return bool(self.header_lines) or self.logo is not None

    def _header_block_height(self):
        if not self._has_header():
            return 0
        text_height = (len(self.header_lines) + 1) * self.header_style.line_height
        logo_height = self.logo_height if self.logo is not None else 0
        return max(text_height, logo_height) + self.header_style.padding_bottom

    def new_page(self):
        self.ops = []
        self.pages.append(self.ops)
        self.y = self.content_top

    @property
    def page_is_fresh(self):
        return self.y == self.content_top

    def fits(self, height):
        return self.y - height >= self.floor

    # -- primitives -------------------------------------------------------

    def text(self, x, text, style):
        self.ops.append(TextOp(x, self.y - style.size, text, style.font, style.size, style.colour))

    def lines_block(self, lines, style):
        for line in lines:
            self.text(self.left, line, style)
            self.y -= style.line_height

    def wrapped(self, text, style, width=None):
        return wrap_text(strip_unsupported(text), style.font, style.size, width or self.content_width)

    # -- blocks -----------------------------------------------------------

    def label_row_height(self):
        return self.label_style.line_height if self.show_labels else 0

    def draw_label_row(self):
        if not self.show_labels:
            return
        x = self.left
        for column, width in zip(self.columns, self.column_widths):
            if column.get("showLabel") is not False:
                label = wrap_text(strip_unsupported(column.get("label") or ""), self.label_style.font,
                                  self.label_style.size, max(1, width - CELL_PADDING), max_lines=1)
                if label:
                    self.text(x, label[0], self.label_style)
            x += width
        self.y -= self.label_style.line_height

    def prepare_row(self, entry):
        fmt = entry_format(entry)
        row_style = row_style_for(self.styles, fmt)
        style = _TextStyle.from_block(row_style, self.row_spacing)
        badge = variant_spec(fmt).badge
        gutter_width = measure_text_width(GUTTER_MARK, GUTTER_FONT, style.size)

        cells = []
        for index, (column, width) in enumerate(zip(self.columns, self.column_widths)):
            text = strip_unsupported(cell_text(entry, column.get("field")))
            if badge and column.get("field") == self.badge_column:
                text = f"{text} {badge}".strip()
            max_width = max(1, width - CELL_PADDING - (gutter_width if index == 0 else 0))
            cells.append(wrap_text(text, style.font, style.size, max_width))

        line_count = max([1] + [len(lines) for lines in cells])
        return {
            "style": style,
            "row_style": row_style,
            "cells": cells,
            "gutter_width": gutter_width,
            "height": line_count * style.line_height,
        }

    def draw_row(self, row):
        style, row_style, height = row["style"], row["row_style"], row["height"]
        row_bottom = self.y - height

        if row_style["backgroundColour"].upper() != "#FFFFFF":
            self.ops.append(RectOp(self.left, row_bottom, self.content_width, height, row_style["backgroundColour"]))

        x = self.left
        for index, (lines, width) in enumerate(zip(row["cells"], self.column_widths)):
            baseline = self.y - style.size
            for line_index, line in enumerate(lines):
                line_x = x
                if index == 0 and line_index == 0:
                    self.ops.append(TextOp(x, baseline, GUTTER_MARK, GUTTER_FONT, style.size, row_style["gutterColour"]))
                    line_x = x + row["gutter_width"]
                elif index == 0:
                    line_x = x + row["gutter_width"]
                self.ops.append(TextOp(line_x, baseline, line, style.font, style.size, style.colour))
                baseline -= style.line_height
            x += width

        underline = row_style["underline"]
        if underline["enabled"]:
            length = underline["width"] if underline["width"] > 0 else self.content_width
            length = min(max(1, length), self.content_width)
            thickness = underline["thickness"] if underline["thickness"] > 0 else 1
            line_y = row_bottom + thickness / 2
            self.ops.append(LineOp(self.left, line_y, self.left + length, line_y, thickness, underline["colour"]))

        self.y = row_bottom

    def draw_key_info(self):
        style = self.key_info_style
        box = self.styles["keyInfo"]["box"]
        padding = box["padding"]
        inner_width = max(1, self.content_width - padding * 2)

        lines = []
        for line in self.key_info_lines:
            lines.extend(wrap_text(strip_unsupported(line), style.font, style.size, inner_width) or [""])

        while lines:
            available = self.y - self.floor - padding * 2
            per_page = max(1, int(available // style.line_height))
            if per_page > len(lines):
                per_page = len(lines)
            if not self.page_is_fresh and per_page < len(lines) and available < style.line_height * 3:
                self.new_page()
                continue
            chunk, lines = lines[:per_page], lines[per_page:]
            height = padding * 2 + len(chunk) * style.line_height
            self.ops.append(RectOp(self.left, self.y - height, self.content_width, height,
                                   box["backgroundColour"], box["borderColour"]))
            self.y -= padding
            for line in chunk:
                self.text(self.left + padding, line, style)
                self.y -= style.line_height
            self.y -= padding
            if lines:
                self.new_page()

        self.y -= box["marginBottom"]

    def draw_group(self, group, first):
        if not first:
            self.y -= self.document["groupPaddingBottom"]
            if self.y < self.document["bottomPageThreshold"]:
                self.new_page()

        title = group.get("title") or group.get("rawKey") or ""
        title_lines = self.wrapped(title, self.title_style)
        meta_lines = []
        for line in str(group.get("metadataAbove") or "").splitlines():
            meta_lines.extend(self.wrapped(line, self.meta_style))

        entries = group.get("entries") or []
        rows = [self.prepare_row(entry) for entry in entries]

        intro_height = (
            len(title_lines) * self.title_style.line_height + self.title_style.padding_bottom
            + (len(meta_lines) * self.meta_style.line_height + self.meta_style.padding_bottom if meta_lines else 0)
            + self.label_row_height()
        )
        first_row_height = rows[0]["height"] if rows else 0

        # Keep the title block together with the first row
        if not self.page_is_fresh and not self.fits(intro_height + first_row_height):
            self.new_page()

        self.lines_block(title_lines, self.title_style)
        self.y -= self.title_style.padding_bottom
        if meta_lines:
            self.lines_block(meta_lines, self.meta_style)
            self.y -= self.meta_style.padding_bottom
        self.draw_label_row()

        for row in rows:
            if not self.page_is_fresh and not self.fits(row["height"]):
                self.new_page()
                self.lines_block(self.wrapped(title + CONTINUED_SUFFIX, self.title_style), self.title_style)
                self.draw_label_row()
            self.draw_row(row)

        below_lines = []
        for line in str(group.get("metadataBelow") or "").splitlines():
            below_lines.extend(self.wrapped(line, self.meta_style))
        if below_lines:
            if not self.fits(len(below_lines) * self.meta_style.line_height):
                self.new_page()
            self.lines_block(below_lines, self.meta_style)

    # -- page furniture ---------------------------------------------------

    def decorate_pages(self):
        total = len(self.pages)
        generated = self.clock.pretty()
        footer_left = strip_unsupported(self.document.get("footer") or self.document.get("filename") or "")

        for index, ops in enumerate(self.pages):
            furniture = []
            if self._has_header():
                style = self.header_style
                text_height = (len(self.header_lines) + 1) * style.line_height
                block_height = self.header_height - style.padding_bottom
                y = self.page_height - self.top - (block_height - text_height)
                for line in self.header_lines + [strip_unsupported(f"As at {generated}")]:
                    furniture.append(TextOp(self.left, y - style.size, line, style.font, style.size, style.colour))
                    y -= style.line_height
            if self.logo is not None:
                furniture.append(ImageOp(
                    self.logo,
                    self.page_width - self.right - self.logo_width,
                    self.page_height - self.top - self.logo_height,
                    self.logo_width,
                    self.logo_height,
                ))

            style = self.footer_style
            main_y = self.bottom + style.line_height
            page_text = f"Page {index + 1} of {total}"
            generated_text = strip_unsupported(f"Document generated {generated}")
            furniture.append(TextOp(self.left, main_y, footer_left, style.font, style.size, style.colour))
            furniture.append(TextOp(
                (self.page_width - measure_text_width(page_text, style.font, style.size)) / 2,
                main_y, page_text, style.font, style.size, style.colour,
            ))
            furniture.append(TextOp(
                self.page_width - self.right - measure_text_width(generated_text, style.font, style.size),
                main_y, generated_text, style.font, style.size, style.colour,
            ))
            if self.footer_credit:
                credit = strip_unsupported(self.footer_credit)
                furniture.append(TextOp(
                    (self.page_width - measure_text_width(credit, style.font, style.size)) / 2,
                    self.bottom, credit, style.font, style.size, style.colour,
                ))
            ops[:0] = furniture

    def build(self):
        groups = self.view.get("groups") or []
        if self.key_info_lines:
            self.draw_key_info()
            if groups:
                self.new_page()

        for index, group in enumerate(groups):
            self.draw_group(group, first=index == 0)

        self.decorate_pages()
        return PdfLayout(
            width=self.page_width,
            height=self.page_height,
            title=self.document.get("filename") or "Schedule",
            pages=self.pages,
        )


def layout_schedule_pdf(view, styles, document, *, clock=None, key_info=None, logo=None, footer_credit=""):
    """
    Paginate a prepared view into pages of draw operations.

    Args:
        view: Prepared snapshot (groups with display titles, columns)
        styles: Normalized style profile
        document: Normalized document settings
        clock: RenderClock for the "As at" and footer timestamps
        key_info: Markdown drawn in a box on page one (groups then start on page two)
        logo: Decoded logo (ImageReader) or None
        footer_credit: Optional second footer line

    Returns:
        PdfLayout

    Raises:
        RenderError: unusable page geometry
    """
    return _ScheduleLayout(view, styles, document, clock or RenderClock(), key_info, logo, footer_credit).build()


def _load_logo(url, fetcher):
    if not url:
        return None
    try:
        data = fetcher(url)
    except ExternalFetchError as e:
        logger.warning(f"[PDF] {e}; rendering without logo")
        return None
    try:
        logo = ImageReader(BytesIO(data))
        logo.getSize()
        return logo
    except Exception as e:
        logger.warning(f"[PDF] Logo at {url} could not be decoded ({e}); rendering without logo")
        return None


def paint(layout):
    """Draw a PdfLayout with ReportLab and return the PDF bytes."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(layout.width, layout.height))
    c.setTitle(strip_unsupported(layout.title))

    for ops in layout.pages:
        for op in ops:
            if isinstance(op, RectOp):
                c.setFillColor(HexColor(op.fill))
                if op.stroke:
                    c.setStrokeColor(HexColor(op.stroke))
                c.rect(op.x, op.y, op.width, op.height, fill=1, stroke=1 if op.stroke else 0)
            elif isinstance(op, TextOp):
                if not op.text:
                    continue
                c.setFillColor(HexColor(op.colour))
                c.setFont(op.font, op.size)
                c.drawString(op.x, op.y, op.text)
            elif isinstance(op, LineOp):
                c.setStrokeColor(HexColor(op.colour))
                c.setLineWidth(op.thickness)
                c.line(op.x1, op.y1, op.x2, op.y2)
            elif isinstance(op, ImageOp):
                c.drawImage(op.image, op.x, op.y, width=op.width, height=op.height, mask='auto')
        c.showPage()

    c.save()
    return buffer.getvalue()


def render_schedule_pdf(view, styles, document, *, clock=None, key_info=None, logo_fetcher=fetch_logo,
                        footer_credit=""):
    """
    Render a prepared view to PDF bytes.

    The logo is fetched with a bounded timeout; a logo that cannot be
    fetched or decoded is logged and left out rather than failing the
    document.

    Raises:
        RenderError: unusable page geometry
    """
    page_geometry(document)
    logo = _load_logo(document["header"]["logo"]["url"], logo_fetcher)
    if key_info is None:
        key_info = view.get("keyInfo")

    layout = layout_schedule_pdf(
        view, styles, document,
        clock=clock, key_info=key_info, logo=logo, footer_credit=footer_credit,
    )
    pdf_bytes = paint(layout)
    logger.info(f"[PDF] Rendered '{layout.title}': {layout.page_count} pages, {len(pdf_bytes)} bytes")
    return pdf_bytes
