"""
PDF Text Utilities

Shared primitives for sanitising, measuring and wrapping text drawn with the
standard Helvetica family in ReportLab.

Encoding rule:
- The standard Type 1 fonts only cover a single-byte encoding. Everything
  outside printable ASCII (0x20-0x7E) is dropped before drawing; no
  replacement glyph is substituted.
"""
import re
from reportlab.pdfbase.pdfmetrics import stringWidth
from typing import List, Optional

_UNSUPPORTED_CHARS = re.compile(r"[^\x20-\x7E]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")
_LINE_BREAKS = re.compile(r"\r\n|\r|\n")


def sanitise_text(value) -> str:
    """Flatten line breaks to spaces and remove control characters."""
    if value is None:
        return ""
    text = _LINE_BREAKS.sub(" ", str(value))
    return _CONTROL_CHARS.sub("", text)


def strip_unsupported(value) -> str:
    """
    Drop every character the standard fonts cannot encode.

    Lossy on purpose: "Café – 10€" becomes "Caf  10".
    """
    return _UNSUPPORTED_CHARS.sub("", sanitise_text(value))


def measure_text_width(text: str, font_name: str, font_size: float) -> float:
    """
    Measure text width in points using ReportLab's stringWidth.

    Args:
        text: Text to measure (already stripped of unsupported characters)
        font_name: Standard or registered font name
        font_size: Font size in points

    Returns:
        Width in points
    """
    if not text:
        return 0.0
    return stringWidth(str(text), font_name, font_size)


def wrap_text(
    text: str,
    font_name: str,
    font_size: float,
    max_width_pts: float,
    max_lines: Optional[int] = None
) -> List[str]:
    """
    Wrap text to fit within max_width, returning a list of lines.

    Uses word-wrap by default. If a single word is too long, splits by character.
    When max_lines is given, the last kept line is truncated with "...".

    Args:
        text: Text to wrap
        font_name: Font name
        font_size: Font size in points
        max_width_pts: Maximum width per line in points
        max_lines: Optional cap on the number of lines

    Returns:
        List of wrapped lines (empty for blank input)
    """
    if not text:
        return []

    words = str(text).strip().split()
    if not words:
        return []

    if max_width_pts <= 0:
        return [" ".join(words)]

    lines = []
    current_line = ""

    for word in words:
        word_width = measure_text_width(word, font_name, font_size)

        if word_width > max_width_pts:
            if current_line:
                lines.append(current_line.strip())
                current_line = ""

            char_line = ""
            for char in word:
                test_line = char_line + char
                if measure_text_width(test_line, font_name, font_size) <= max_width_pts:
                    char_line = test_line
                else:
                    if char_line:
                        lines.append(char_line)
                    char_line = char
            if char_line:
                current_line = char_line + " "
            continue

        test_line = current_line + word + " "
        if measure_text_width(test_line.strip(), font_name, font_size) <= max_width_pts:
            current_line = test_line
        else:
            if current_line:
                lines.append(current_line.strip())
            current_line = word + " "

    if current_line.strip():
        lines.append(current_line.strip())

    if max_lines is not None and len(lines) > max_lines:
        lines = lines[:max_lines]
        last_line = lines[-1]
        ellipsis = "..."
        while last_line and measure_text_width(last_line + ellipsis, font_name, font_size) > max_width_pts:
            last_line = last_line[:-1]
        lines[-1] = last_line + ellipsis

    return lines
