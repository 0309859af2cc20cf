"""Helpers shared by the HTML and PDF schedule renderers."""
from urllib.parse import urlparse

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import escape

from config import TEMPLATES_DIR
from services.row_formats import resolve_variant
from services.styles import as_number

DEFAULT_COLUMN_WIDTH = 100

# fontStyle -> standard Type 1 font
PDF_FONTS = {
    "normal": "Helvetica",
    "bold": "Helvetica-Bold",
    "italic": "Helvetica-Oblique",
    "bolditalic": "Helvetica-BoldOblique",
}

template_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def escape_html(value) -> str:
    """Entity-escape & < > " ' for interpolation into markup."""
    return str(escape("" if value is None else value))


def safe_url(url) -> str:
    """Keep http(s) and relative URLs; anything else (javascript:, data:) becomes ''."""
    if not isinstance(url, str):
        return ""
    url = url.strip()
    if not url:
        return ""
    scheme = urlparse(url).scheme.lower()
    if scheme and scheme not in ("http", "https"):
        return ""
    return url


def entry_format(entry) -> str:
    for key in ("format", "style", "status"):
        value = entry.get(key)
        if isinstance(value, str) and value:
            return resolve_variant(value).value
    return resolve_variant(None).value


def entry_fields(entry):
    fields = entry.get("fields")
    return fields if isinstance(fields, dict) else entry


def cell_text(entry, field) -> str:
    value = entry_fields(entry).get(field)
    if value is None and field == "date":
        value = entry.get("dateKey")
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value if v is not None)
    return "" if value is None else str(value)


def column_weights(columns):
    weights = []
    for column in columns:
        width = as_number(column.get("width"), DEFAULT_COLUMN_WIDTH)
        weights.append(width if width > 0 else DEFAULT_COLUMN_WIDTH)
    return weights


def column_fractions(columns):
    """width_i / sum(widths); invalid widths count as the default width."""
    weights = column_weights(columns)
    total = sum(weights)
    if not total:
        return []
    return [w / total for w in weights]


def column_percentages(columns):
    return [f"{fraction * 100:.4f}%" for fraction in column_fractions(columns)]


def show_label_row(columns) -> bool:
    return any(column.get("showLabel") is not False for column in columns)


def badge_field(columns):
    """Column that receives the NEW badge: description when present, else the first."""
    fields = [column.get("field") for column in columns]
    if "description" in fields:
        return "description"
    return fields[0] if fields else None
