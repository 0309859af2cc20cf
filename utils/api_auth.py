import secrets

from flask import request


def presented_api_key(body=None):
    """API key from the JSON body (``api_key``) or an ``Authorization: Bearer`` header."""
    if isinstance(body, dict) and isinstance(body.get("api_key"), str):
        return body["api_key"]
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return ""


def api_key_valid(presented, expected):
    if not presented or not expected:
        return False
    return secrets.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))
