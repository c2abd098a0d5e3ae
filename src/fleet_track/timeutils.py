"""Timestamp parsing and duration formatting for GPS reports."""

from __future__ import annotations

from datetime import datetime, timezone


def parse_timestamp(value: str) -> datetime | None:
    """Parse a report timestamp such as ``"2025-03-01 08:15:42"``.

    ISO ``T``-separated values are accepted as well.  Values carrying a UTC
    offset (``Z``, ``+08:00``) are converted to UTC and returned naive, so
    every parsed timestamp compares with every other.  Returns None when
    *value* cannot be parsed.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def split_timestamp(value: str) -> tuple[str, str]:
    """Split *value* into ``(date, time)`` on the first space or ``T``.

    The time part is ``""`` when *value* carries only a date.
    """
    value = value.strip()
    for sep in (" ", "T"):
        if sep in value:
            date_part, time_part = value.split(sep, 1)
            return date_part, time_part
    return value, ""


def seconds_between(start: str, end: str) -> float:
    """Absolute number of seconds between two timestamps (0.0 if either is invalid)."""
    t0 = parse_timestamp(start)
    t1 = parse_timestamp(end)
    if t0 is None or t1 is None:
        return 0.0
    return abs((t1 - t0).total_seconds())


def format_duration(seconds: float) -> str:
    """Format *seconds* as ``"1h 5m 3s"``.

    Hours are omitted when zero; minutes are shown when non-zero or when
    hours are present.  Seconds are always shown.
    """
    total = int(max(0.0, seconds))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)

    parts: list[str] = []
    if h > 0:
        parts.append(f"{h}h")
    if m > 0 or h > 0:
        parts.append(f"{m}m")
    parts.append(f"{s}s")
    return " ".join(parts)
