"""
Operator-entered Markdown ("key info") to safe HTML.

The Markdown is trusted only as formatting: the generated HTML is run
through an allow-list sanitizer, and every surviving link opens in a new
tab with rel="noopener".
"""
import re

import markdown as markdown_lib
import nh3

ALLOWED_TAGS = {
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "strong", "em", "ul", "ol", "li",
    "blockquote", "code", "pre", "br", "hr", "a", "span",
}
# rel and target are set by the sanitizer itself on every link
ALLOWED_ATTRIBUTES = {
    "a": {"href", "title"},
    "span": {"class"},
}

_LINK = re.compile(r"\[([^\]]*)\]\(([^)]*)\)")
_EMPHASIS = re.compile(r"(\*\*|__|\*|_|`)")
_HEADING = re.compile(r"^\s{0,3}#{1,6}\s*")
_BULLET = re.compile(r"^\s*[-*+]\s+")
_QUOTE = re.compile(r"^\s*>\s?")


def render_markdown(text) -> str:
    """Markdown -> sanitized HTML; blank input gives ''."""
    if not isinstance(text, str) or not text.strip():
        return ""
    raw_html = markdown_lib.markdown(text, extensions=["sane_lists"])
    return nh3.clean(
        raw_html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        link_rel="noopener",
        set_tag_attribute_values={"a": {"target": "_blank"}},
    )


def markdown_to_lines(text):
    """
    Strip Markdown syntax down to plain text lines for the PDF key-info box.

    Links keep their label followed by the URL in brackets; bullets become
    "- "; blank lines are kept so paragraphs stay separated.
    """
    if not isinstance(text, str):
        return []
    lines = []
    for line in text.splitlines():
        is_bullet = bool(_BULLET.match(line))
        line = _HEADING.sub("", line)
        line = _BULLET.sub("", line)
        line = _QUOTE.sub("", line)
        line = _LINK.sub(lambda m: f"{m.group(1)} ({m.group(2)})" if m.group(2) else m.group(1), line)
        line = _EMPHASIS.sub("", line).strip()
        lines.append(f"- {line}" if is_bullet and line else line)

    while lines and not lines[-1]:
        lines.pop()
    while lines and not lines[0]:
        lines.pop(0)
    return lines
