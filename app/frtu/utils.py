from __future__ import annotations

from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

BUDDHIST_ERA_OFFSET = 543


def format_thai_timestamp(dt: datetime, tz: tzinfo | None = None) -> str:
    """Render like the th-TH locale: D/M/YYYY (Buddhist era) HH:MM:SS."""
    if tz is not None:
        dt = dt.astimezone(tz)
    return f"{dt.day}/{dt.month}/{dt.year + BUDDHIST_ERA_OFFSET} {dt:%H:%M:%S}"


def display_zone(name: str | None) -> tzinfo | None:
    """Resolve a configured zone name; None (server local time) when blank."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        raise ValueError(f"Unknown timezone: {name!r}") from None
