"""
Filename utilities for safe, deterministic artifact key generation.

Keys follow the public layout served by the edge proxy:
    public/<app>/<event>/<name>.html
    public/<app>/<event>/<name>-<YYYYMMDD-HHMM>.pdf
"""
import re

_WHITESPACE_AND_BRACKETS = re.compile(r"[\s()\[\]{}<>]+")
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def sanitise_name(text, fallback: str = "snapshot") -> str:
    """
    Reduce text to [A-Za-z0-9._-] for use as a path segment.

    Whitespace and brackets are removed (not replaced), so "Day 1 (Load In)"
    becomes "Day1LoadIn". Leading dots are stripped to avoid hidden files
    and "..".
    """
    if text is None:
        return fallback
    s = _WHITESPACE_AND_BRACKETS.sub("", str(text))
    s = _UNSAFE.sub("", s)
    s = s.lstrip(".")
    return s or fallback


def public_prefix(app_name, event_name) -> str:
    return f"public/{sanitise_name(app_name, 'app')}/{sanitise_name(event_name, 'event')}"


def html_key(prefix: str, slug: str) -> str:
    return f"{prefix}/{slug}.html"


def pdf_key(prefix: str, slug: str, stamp: str) -> str:
    """PDF keys carry the render stamp so each render is a new immutable object."""
    return f"{prefix}/{slug}-{stamp}.pdf"
