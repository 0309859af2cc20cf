"""
Request-scoped clock and human-readable timestamp formatting.

A RenderClock is created once per render request and handed to every
renderer, so all artifacts produced by one request carry the same instant
and tests can pin that instant.

Formats:
    pretty()          "Wednesday 27th August 2025 at 6.17pm"
    file_stamp()      "20250827-1817"
    friendly_date()   "Thursday, 15 May 2025"
"""
from datetime import datetime, date, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def ordinal_suffix(day: int) -> str:
    if 3 < day < 21:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


class RenderClock:
    """
    Fixed instant for one render request, expressed in a display timezone.

    Args:
        tz_name: IANA timezone used for all human-readable output
        fixed: Optional aware or naive (treated as UTC) datetime to pin the clock
    """

    def __init__(self, tz_name: str = "Europe/London", fixed: Optional[datetime] = None):
        self.tz = ZoneInfo(tz_name)
        instant = fixed or utc_now()
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant.astimezone(self.tz)

    def iso(self) -> str:
        return self._instant.astimezone(timezone.utc).isoformat()

    def epoch_ms(self) -> int:
        return int(self._instant.timestamp() * 1000)

    def pretty(self) -> str:
        local = self.now()
        hour = local.hour % 12 or 12
        meridiem = "am" if local.hour < 12 else "pm"
        return (
            f"{local.strftime('%A')} {local.day}{ordinal_suffix(local.day)} "
            f"{local.strftime('%B %Y')} at {hour}.{local.minute:02d}{meridiem}"
        )

    def file_stamp(self) -> str:
        return self.now().strftime("%Y%m%d-%H%M")


def friendly_date(value) -> str:
    """
    Format an ISO date (or datetime) string as "Thursday, 15 May 2025".

    Dates are taken at face value (no timezone shift). Unparseable input is
    returned unchanged so group titles never disappear.
    """
    if not value:
        return ""
    raw = str(value).strip()
    try:
        parsed = date.fromisoformat(raw[:10])
    except ValueError:
        return raw
    return f"{parsed.strftime('%A')}, {parsed.day} {parsed.strftime('%B %Y')}"
