"""
Style profile normalization.

Stored profiles have drifted over time (v1 used highlight/lowlight row
keys, some blocks use ``colour`` instead of ``fontColour``, numbers arrive
as strings from older editors). ``normalize_styles`` turns any of those
shapes into one canonical structure and never raises. It is run on every
read and its output is never written back to the store.
"""
import math
import re

from constants import (
    NAMED_COLOURS,
    DEFAULT_FONT_COLOUR,
    DEFAULT_BACKGROUND_COLOUR,
    DEFAULT_ROW_FONT_SIZE,
    DEFAULT_LINE_SPACING,
    DEFAULT_UNDERLINE_WIDTH,
    DEFAULT_UNDERLINE_THICKNESS,
    STYLE_BLOCK_DEFAULTS,
    KEY_INFO_BOX_DEFAULTS,
    DEFAULT_PAGE_WIDTH,
    DEFAULT_PAGE_HEIGHT,
    DEFAULT_MARGIN,
    DEFAULT_LOGO_WIDTH,
    DEFAULT_LOGO_HEIGHT,
)
from services.row_formats import RowVariant, VARIANTS, ROW_STYLE_SCHEMA_VERSION

_HEX_DIGITS = re.compile(r"^#[0-9A-Fa-f]+$")

# Block name -> keys it may be stored under, highest priority first
BLOCK_SOURCE_KEYS = {
    "header": ("header",),
    "footer": ("footer",),
    "groupTitle": ("groupTitle", "title"),
    "groupMetadata": ("groupMetadata", "metadata"),
    "labelRow": ("labelRow", "labels"),
    "keyInfo": ("keyInfo",),
}

_FONT_STYLE_ALIASES = {
    "normal": "normal",
    "regular": "normal",
    "bold": "bold",
    "italic": "italic",
    "bolditalic": "bolditalic",
    "bold-italic": "bolditalic",
    "bold italic": "bolditalic",
    "italicbold": "bolditalic",
    "italic-bold": "bolditalic",
}


def to_hex_colour(value, fallback=DEFAULT_FONT_COLOUR):
    """
    Normalize a colour to 7-character ``#RRGGBB``.

    "#abc" -> "#aabbcc", "red" -> "#FF0000"; anything unrecognized returns
    ``fallback`` unchanged. Case of hex digits is preserved.
    """
    if not isinstance(value, str):
        return fallback
    v = value.strip()
    if v.startswith("#") and _HEX_DIGITS.match(v):
        if len(v) == 4:
            return "#" + "".join(ch * 2 for ch in v[1:])
        if len(v) == 7:
            return v
        return fallback
    return NAMED_COLOURS.get(v.lower(), fallback)


def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def as_number(value, default):
    if is_number(value):
        return value
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        if math.isfinite(parsed):
            return int(parsed) if parsed.is_integer() else parsed
    return default


def _flag(value, default=True):
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() not in {"false", "0", "no", "off"}
    if value is None:
        return default
    return bool(value)


def _font_style(value, default):
    if not isinstance(value, str):
        return default
    return _FONT_STYLE_ALIASES.get(value.strip().lower(), default)


def _dict(value):
    return value if isinstance(value, dict) else {}


def _first_present(source, keys):
    for key in keys:
        if isinstance(source.get(key), dict):
            return source[key]
    return {}


def _underline(layers, font_colour):
    merged = {}
    for layer in layers:
        raw = layer.get("underline")
        if isinstance(raw, dict):
            merged.update(raw)
        elif isinstance(raw, bool):
            merged["enabled"] = raw
    return {
        "enabled": _flag(merged.get("enabled"), True),
        "width": as_number(merged.get("width"), DEFAULT_UNDERLINE_WIDTH),
        "thickness": as_number(merged.get("thickness"), DEFAULT_UNDERLINE_THICKNESS),
        "colour": to_hex_colour(merged.get("colour"), font_colour),
    }


def _row_style(variant, rows):
    spec = VARIANTS[variant]
    default_raw = _first_present(rows, VARIANTS[RowVariant.DEFAULT].source_keys)
    own_raw = _first_present(rows, spec.source_keys)

    # Variants inherit explicit default-row values, except the font style
    # which each variant defaults on its own.
    layers = [own_raw] if variant is RowVariant.DEFAULT else [default_raw, own_raw]
    merged = {}
    for layer in layers:
        merged.update(layer)
    if variant is not RowVariant.DEFAULT:
        merged["fontStyle"] = own_raw.get("fontStyle")

    font_colour = to_hex_colour(merged.get("fontColour", merged.get("colour")), DEFAULT_FONT_COLOUR)
    return {
        "fontSize": as_number(merged.get("fontSize"), DEFAULT_ROW_FONT_SIZE),
        "fontStyle": _font_style(merged.get("fontStyle"), spec.font_style),
        "fontColour": font_colour,
        "backgroundColour": to_hex_colour(merged.get("backgroundColour"), DEFAULT_BACKGROUND_COLOUR),
        "gutterColour": to_hex_colour(merged.get("gutterColour"), font_colour),
        "underline": _underline(layers, font_colour),
    }


def _style_block(name, raw):
    font_size, font_style, padding_bottom = STYLE_BLOCK_DEFAULTS[name]
    font_colour = to_hex_colour(raw.get("fontColour", raw.get("colour")), DEFAULT_FONT_COLOUR)
    return {
        "fontSize": as_number(raw.get("fontSize"), font_size),
        "fontStyle": _font_style(raw.get("fontStyle"), font_style),
        "fontColour": font_colour,
        "backgroundColour": to_hex_colour(raw.get("backgroundColour"), DEFAULT_BACKGROUND_COLOUR),
        "paddingTop": as_number(raw.get("paddingTop"), 0),
        "paddingBottom": as_number(raw.get("paddingBottom"), padding_bottom),
    }


def _key_info_box(raw):
    box = _dict(raw.get("box"))
    return {
        "backgroundColour": to_hex_colour(box.get("backgroundColour"), KEY_INFO_BOX_DEFAULTS["backgroundColour"]),
        "borderColour": to_hex_colour(box.get("borderColour"), KEY_INFO_BOX_DEFAULTS["borderColour"]),
        "padding": as_number(box.get("padding"), KEY_INFO_BOX_DEFAULTS["padding"]),
        "marginBottom": as_number(box.get("marginBottom"), KEY_INFO_BOX_DEFAULTS["marginBottom"]),
    }


def normalize_document(raw_document):
    """
    Fill DocumentSettings defaults (A4 landscape, 50pt margins).

    Numeric page sizes are kept as given, including zero or negative values,
    so the PDF renderer can reject them; non-numeric values use defaults.
    """
    raw = _dict(raw_document)
    page = _dict(raw.get("pageSize"))
    header = _dict(raw.get("header"))
    logo = _dict(header.get("logo"))
    text = header.get("text")
    if isinstance(text, str):
        text = [text]
    footer = raw.get("footer")

    return {
        "pageSize": {
            "width": as_number(page.get("width"), DEFAULT_PAGE_WIDTH),
            "height": as_number(page.get("height"), DEFAULT_PAGE_HEIGHT),
        },
        "leftMargin": as_number(raw.get("leftMargin"), DEFAULT_MARGIN),
        "rightMargin": as_number(raw.get("rightMargin"), DEFAULT_MARGIN),
        "topMargin": as_number(raw.get("topMargin"), DEFAULT_MARGIN),
        "bottomMargin": as_number(raw.get("bottomMargin"), DEFAULT_MARGIN),
        "groupPaddingBottom": as_number(raw.get("groupPaddingBottom"), 0),
        "bottomPageThreshold": as_number(raw.get("bottomPageThreshold"), 0),
        "header": {
            "logo": {
                "url": logo.get("url") if isinstance(logo.get("url"), str) else "",
                "width": as_number(logo.get("width"), DEFAULT_LOGO_WIDTH),
                "height": as_number(logo.get("height"), DEFAULT_LOGO_HEIGHT),
            },
            "text": [str(line) for line in (text or []) if line is not None],
        },
        "footer": footer if isinstance(footer, str) else "",
        "filename": raw.get("filename") if isinstance(raw.get("filename"), str) else "",
    }


def normalize_styles(raw_styles, raw_document=None):
    """
    Return the canonical StyleProfile for any stored style document.

    Args:
        raw_styles: The ``styles`` object of a profile (any shape, may be None)
        raw_document: DocumentSettings; defaults to ``raw_styles["document"]``

    Returns:
        dict with ``row`` (four RowStyles plus ``lineSpacing``), the style
        blocks ``header``, ``footer``, ``groupTitle``, ``groupMetadata``,
        ``labelRow``, ``keyInfo`` (with ``box``) and ``document``.
    """
    raw = _dict(raw_styles)
    rows = _dict(raw.get("row"))

    line_spacing = rows.get("lineSpacing", raw.get("lineSpacing"))
    profile = {
        "schemaVersion": ROW_STYLE_SCHEMA_VERSION,
        "row": {variant.value: _row_style(variant, rows) for variant in RowVariant},
    }
    profile["row"]["lineSpacing"] = line_spacing if is_number(line_spacing) else DEFAULT_LINE_SPACING

    for name, keys in BLOCK_SOURCE_KEYS.items():
        block_raw = _first_present(raw, keys)
        if name == "keyInfo":
            profile[name] = _style_block(name, _dict(block_raw.get("text")) or block_raw)
            profile[name]["box"] = _key_info_box(block_raw)
        else:
            profile[name] = _style_block(name, block_raw)

    profile["document"] = normalize_document(raw_document if raw_document is not None else raw.get("document"))
    return profile
