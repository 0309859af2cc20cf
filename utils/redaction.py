"""Helpers for safely logging connection strings and secrets."""

from __future__ import annotations

from urllib.parse import urlparse


def redact_database_url(url: str) -> str:
    """Return DATABASE_URL with password masked for logs/errors."""
    raw = (url or "").strip()
    if not raw:
        return "EMPTY_DATABASE_URL"
    try:
        parsed = urlparse(raw)
        scheme = parsed.scheme or "postgresql"
        host = parsed.hostname or "unknown-host"
        port = f":{parsed.port}" if parsed.port else ""
        db_name = parsed.path.lstrip("/") or "unknown-db"
        if parsed.username:
            return f"{scheme}://{parsed.username}:****@{host}{port}/{db_name}"
        return f"{scheme}://{host}{port}/{db_name}"
    except ValueError:
        return "INVALID_DATABASE_URL"


def redact_secret(value, visible: int = 4) -> str:
    """Show only the first few characters of an API key for log correlation."""
    raw = str(value or "")
    if not raw:
        return "<none>"
    if len(raw) <= visible:
        return "*" * len(raw)
    return raw[:visible] + "*" * (len(raw) - visible)


def redact_payload(body) -> dict:
    """Copy of a request body without credentials, safe to persist."""
    if not isinstance(body, dict):
        return {}
    return {k: v for k, v in body.items() if k not in {"api_key", "apiKey"}}
