"""
Row variants and the single table both renderers read from.

An entry's ``format`` picks one of four variants. The variant decides the
CSS class in HTML, the RowStyle block used in the PDF, the default font
style applied during normalization, and an optional badge. Keeping these in
one table is what keeps the two outputs from drifting apart.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class RowVariant(str, Enum):
    DEFAULT = "default"
    IMPORTANT = "important"
    NEW = "new"
    PAST = "past"


@dataclass(frozen=True)
class VariantSpec:
    css_class: str
    font_style: str
    # Keys read from stored styles.row, highest priority first
    source_keys: Tuple[str, ...]
    badge: Optional[str] = None


# Normalization schema version 2: "highlight"/"lowlight" were the v1 names
ROW_STYLE_SCHEMA_VERSION = 2

VARIANTS = {
    RowVariant.DEFAULT: VariantSpec("row-default", "normal", ("default",)),
    RowVariant.IMPORTANT: VariantSpec("row-important", "bold", ("important",)),
    RowVariant.NEW: VariantSpec("row-new", "normal", ("new", "highlight"), badge="NEW"),
    RowVariant.PAST: VariantSpec("row-past", "italic", ("past", "lowlight")),
}


def resolve_variant(value) -> RowVariant:
    """Map an entry's format value to a variant; unknown or missing is DEFAULT."""
    if isinstance(value, RowVariant):
        return value
    try:
        return RowVariant(str(value or "").strip().lower())
    except ValueError:
        return RowVariant.DEFAULT


def variant_spec(value) -> VariantSpec:
    return VARIANTS[resolve_variant(value)]


def row_style_for(styles: dict, value) -> dict:
    """Resolved RowStyle for an entry format from normalized styles."""
    return styles["row"][resolve_variant(value).value]
