"""
Environment variable readers used by config.py.

All helpers strip whitespace by default; hosted dashboards and .env files
are both prone to trailing spaces that silently break API keys and URLs.
"""
import os
from typing import Optional


def get_env_str(
    name: str,
    default: Optional[str] = None,
    required: bool = False,
    strip: bool = True
) -> Optional[str]:
    """
    Read a string environment variable.

    Args:
        name: Environment variable name
        default: Returned when the variable is unset or empty after strip
        required: If True, raise ValueError when missing/empty
        strip: If True, strip leading/trailing whitespace (default: True)

    Returns:
        The value (stripped if requested), or default if not set/empty

    Raises:
        ValueError: If required=True and value is missing or empty after strip

    Examples:
        >>> get_env_str("API_KEY")  # None if not set
        >>> get_env_str("HOME_FILENAME", default="mom.html")
        >>> get_env_str("S3_BUCKET", required=True)  # Raises if not set
    """
    value = os.getenv(name)

    if value is None:
        if required:
            raise ValueError(
                f"Required environment variable '{name}' is not set. "
                f"Please add it to your .env file or environment."
            )
        return default

    if strip:
        value = value.strip()

    if not value:
        if required:
            raise ValueError(
                f"Required environment variable '{name}' is empty (or whitespace-only). "
                f"Please set a valid value in your .env file or environment."
            )
        return default

    return value


def get_env_bool(name: str, default: bool = False) -> bool:
    """
    Read a boolean environment variable.

    Truthy values: "1", "true", "yes", "on" (case-insensitive).
    Anything else that is non-empty is False; unset or empty gives default.
    """
    value = os.getenv(name, "").strip().lower()

    if not value:
        return default

    return value in ("1", "true", "yes", "on")


def get_env_int(name: str, default: int) -> int:
    """Read an integer; unparseable values fall back to default."""
    raw = get_env_str(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_env_float(name: str, default: float) -> float:
    """Read a float; unparseable values fall back to default."""
    raw = get_env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default
