"""RecordNormalizer: converts raw GPS report dicts to TrackPoint."""

from __future__ import annotations

import math
from typing import Any

from fleet_track.timeutils import split_timestamp
from fleet_track.track.models import TrackPoint

POSITION_REPORT_ID = "0200"

# Raw key path → divisor.  Candidates are tried in order; the first one whose
# value is present wins.  Decimal-degree sources come before the micro-degree
# integer so an already-scaled value is never divided twice.
_BODY = ("detailed", "body")
_PARSED = ("detailed", "body", "parsed")

FIELD_CHAINS: dict[str, tuple[tuple[tuple[str, ...], float], ...]] = {
    "lat": (
        (("latitude",),                          1.0),
        (_PARSED + ("latitude",),                1.0),
        (_BODY + ("latitude", "degrees"),        1.0),
        (_BODY + ("latitude", "decimal"),        1_000_000.0),
    ),
    "lng": (
        (("longitude",),                         1.0),
        (_PARSED + ("longitude",),               1.0),
        (_BODY + ("longitude", "degrees"),       1.0),
        (_BODY + ("longitude", "decimal"),       1_000_000.0),
    ),
    "speed_kmh": (
        (("speed",),                             1.0),
        (_PARSED + ("speed",),                   1.0),
        (_BODY + ("speed", "decimal"),           1.0),
    ),
    "mileage_km": (
        (("mileage",),                           1.0),
        (_PARSED + ("mileage",),                 1.0),
        (_BODY + ("mileage", "decimal"),         10.0),
    ),
    "heading": (
        (("azimuth",),                           1.0),
        (_PARSED + ("azimuth",),                 1.0),
    ),
}

TIMESTAMP_KEYS: tuple[str, ...] = ("gps_time", "timestamp")
MESSAGE_ID_KEYS: tuple[str, ...] = ("messageIdHex", "messageId")


def _dig(raw: Any, path: tuple[str, ...]) -> Any:
    """Follow *path* through nested dicts; None if any hop is missing."""
    node = raw
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


def _to_float(value: Any) -> float:
    """Coerce *value* to a finite float; anything unusable becomes 0.0."""
    if isinstance(value, bool):
        return 0.0
    try:
        f = float(value)
    except (TypeError, ValueError):
        return 0.0
    return f if math.isfinite(f) else 0.0


def extract_field(raw: dict, name: str) -> float:
    """Return the value of canonical field *name* using its fallback chain."""
    for path, divisor in FIELD_CHAINS[name]:
        value = _dig(raw, path)
        if value is not None:
            return _to_float(value) / divisor
    return 0.0


def first_present(raw: dict, keys: tuple[str, ...]) -> Any:
    """Return the first non-empty value among *keys*, or None."""
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def is_position_report(raw: dict) -> bool:
    """True unless *raw* carries a message id other than the position report code.

    Records without a message id are assumed to be pre-filtered upstream.
    """
    msg_id = first_present(raw, MESSAGE_ID_KEYS)
    if msg_id is None:
        return True
    if isinstance(msg_id, int) and not isinstance(msg_id, bool):
        return msg_id == int(POSITION_REPORT_ID, 16)
    text = str(msg_id).strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    return text == POSITION_REPORT_ID


class RecordNormalizer:
    """Normalizes one raw GPS report into a :class:`TrackPoint`.

    Field names and units vary between API versions; each canonical field is
    read through :data:`FIELD_CHAINS`.  Non-numeric values are silently
    coerced to 0.
    """

    def normalize(self, raw: dict) -> TrackPoint | None:
        """Convert *raw* to a :class:`TrackPoint`.

        Returns None when *raw* is not a position report or has no timestamp.
        The returned point has ``sequence_id == trip_id == 0``.
        """
        if not isinstance(raw, dict) or not is_position_report(raw):
            return None

        timestamp = first_present(raw, TIMESTAMP_KEYS)
        if timestamp is None:
            return None
        timestamp = str(timestamp)
        date, time = split_timestamp(timestamp)

        mileage = extract_field(raw, "mileage_km")
        return TrackPoint(
            timestamp=timestamp,
            date=date,
            time=time,
            lat=extract_field(raw, "lat"),
            lng=extract_field(raw, "lng"),
            speed_kmh=max(0.0, extract_field(raw, "speed_kmh")),
            mileage_km=round(mileage, 1),
            raw_mileage_km=mileage,
        )

    def normalize_all(self, records: list[dict]) -> list[TrackPoint]:
        """Normalize *records*, dropping the unrepresentable ones.  Order is preserved."""
        points: list[TrackPoint] = []
        for raw in records:
            point = self.normalize(raw)
            if point is not None:
                points.append(point)
        return points


def flatten_records(payload: Any) -> list[dict]:
    """Unwrap a packets API response into a flat record list.

    Accepted shapes: a bare list, ``{"data": [...]}``, or the grouped form
    ``{"data": [{"deviceId": ..., "logs": [...]}, ...]}``.  Anything else
    yields ``[]``.
    """
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        items = payload["data"]
    else:
        return []

    if items and isinstance(items[0], dict) and "logs" in items[0]:
        flat: list[dict] = []
        for group in items:
            if isinstance(group, dict):
                flat.extend(group.get("logs") or [])
        return flat
    return list(items)


def within_dates(point: TrackPoint, start: str | None, end: str | None) -> bool:
    """Inclusive ``YYYY-MM-DD`` range check on ``point.date``."""
    if start and point.date < start:
        return False
    if end and point.date > end:
        return False
    return True
