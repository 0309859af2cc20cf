"""
Schedule HTML renderer.

Produces one self-contained page (CSS inlined) for a prepared snapshot.
All user text goes through Jinja2 autoescaping; the only markup inserted
verbatim is key info that has already been sanitized.
"""
import logging

from markupsafe import Markup

from services.row_formats import RowVariant, VARIANTS
from services.rendering.common import (
    template_env,
    safe_url,
    entry_format,
    cell_text,
    column_percentages,
    show_label_row,
    badge_field,
)
from services.rendering.markdown_render import render_markdown
from utils.timestamps import RenderClock

logger = logging.getLogger(__name__)

_CSS_FONT = {
    "normal": "font-weight: normal; font-style: normal;",
    "bold": "font-weight: bold; font-style: normal;",
    "italic": "font-weight: normal; font-style: italic;",
    "bolditalic": "font-weight: bold; font-style: italic;",
}


def _block_css(block):
    styled = dict(block)
    styled["css_font"] = _CSS_FONT.get(block.get("fontStyle"), _CSS_FONT["normal"])
    return styled


def _row_rules(styles):
    rules = []
    for variant in RowVariant:
        row = _block_css(styles["row"][variant.value])
        row["css_class"] = VARIANTS[variant].css_class
        row["underline"] = row["underline"] if row["underline"]["enabled"] else None
        rules.append(row)
    return rules


def _columns(columns):
    percents = column_percentages(columns)
    return [
        {
            "field": column.get("field"),
            "label": column.get("label") or "",
            "showLabel": column.get("showLabel") is not False,
            "percent": percent,
        }
        for column, percent in zip(columns, percents)
    ]


def _rows(entries, columns, badge_column):
    rows = []
    for entry in entries:
        variant = VARIANTS[RowVariant(entry_format(entry))]
        cells = [
            {
                "text": cell_text(entry, column["field"]),
                "percent": column["percent"],
                "badge": variant.badge if column["field"] == badge_column else None,
            }
            for column in columns
        ]
        rows.append({"css_class": variant.css_class, "cells": cells})
    return rows


def render_schedule_html(view, styles, document, pdf_url=None, *, clock=None, key_info=None,
                         home_href=None, footer_credit=""):
    """
    Render a prepared snapshot view to an HTML string.

    Args:
        view: Prepared snapshot (``groups`` with display titles, ``columns``)
        styles: Normalized style profile
        document: Normalized document settings (``filename``, header lines, logo)
        pdf_url: Link target for the "Download PDF" button, if any
        clock: RenderClock shared by the request; a fresh one when omitted
        key_info: Markdown shown in a collapsible panel
        home_href: Link back to the home page
        footer_credit: Optional credit line in the footer

    Returns:
        Complete HTML document as a string
    """
    clock = clock or RenderClock()
    columns = _columns(view.get("columns") or [])
    badge_column = badge_field(columns)

    groups = [
        {
            "title": group.get("title") or group.get("rawKey") or "",
            "metadataAbove": group.get("metadataAbove") or "",
            "metadataBelow": group.get("metadataBelow") or "",
            "rows": _rows(group.get("entries") or [], columns, badge_column),
        }
        for group in view.get("groups") or []
    ]

    title = document.get("filename") or "Schedule"
    key_info_html = render_markdown(key_info if key_info is not None else view.get("keyInfo"))

    html = template_env.get_template("schedule.html").render(
        title=title,
        header_lines=document["header"]["text"],
        logo_url=safe_url(document["header"]["logo"]["url"]),
        generated_at=clock.pretty(),
        pdf_url=safe_url(pdf_url),
        home_href=safe_url(home_href),
        key_info_html=Markup(key_info_html),
        show_labels=show_label_row(columns),
        columns=columns,
        groups=groups,
        footer_text=document.get("footer") or title,
        footer_credit=footer_credit,
        header_style=styles["header"],
        title_style=_block_css(styles["groupTitle"]),
        meta_style=_block_css(styles["groupMetadata"]),
        label_style=_block_css(styles["labelRow"]),
        row_rules=_row_rules(styles),
    )
    logger.info(f"[HTML] Rendered '{title}': {len(groups)} groups, {len(html)} chars")
    return html
