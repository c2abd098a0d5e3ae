"""Single-record merge and polling snapshots for the live fleet map.

The push transport gives no ordering guarantee, so every update is gated on
its timestamp: an update older than the position already held for the same
device is ignored.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fleet_track.live.models import VehiclePosition
from fleet_track.timeutils import parse_timestamp
from fleet_track.track.normalizer import TIMESTAMP_KEYS, extract_field, first_present

_logger = logging.getLogger(__name__)

DEVICE_ID_KEYS: tuple[str, ...] = ("deviceId", "device_id", "id")
DEVICE_NAME_KEYS: tuple[str, ...] = ("deviceName", "device_name", "name")


def vehicle_from_raw(
    raw: dict,
    device_id: str | None = None,
    name: str | None = None,
) -> VehiclePosition | None:
    """Build a :class:`VehiclePosition` from one raw report.

    *device_id* / *name* override whatever the record carries (used when the
    record comes from a per-device log group).  Returns None when no device
    identity or no timestamp can be found.
    """
    if not isinstance(raw, dict):
        return None
    if device_id is None:
        found = first_present(raw, DEVICE_ID_KEYS)
        device_id = str(found) if found is not None else None
    if device_id is None:
        return None

    timestamp = first_present(raw, TIMESTAMP_KEYS)
    if timestamp is None:
        return None

    if name is None:
        found_name = first_present(raw, DEVICE_NAME_KEYS)
        name = str(found_name) if found_name is not None else device_id

    return VehiclePosition(
        device_id=device_id,
        name=name,
        lat=extract_field(raw, "lat"),
        lng=extract_field(raw, "lng"),
        speed_kmh=max(0.0, extract_field(raw, "speed_kmh")),
        heading=extract_field(raw, "heading"),
        timestamp=str(timestamp),
    )


def _is_newer_or_equal(update: VehiclePosition, held: VehiclePosition) -> bool:
    t_new = parse_timestamp(update.timestamp)
    t_held = parse_timestamp(held.timestamp)
    if t_new is None:
        return False
    if t_held is None:
        return True
    return t_new >= t_held


def merge_live_update(existing: list[VehiclePosition], raw_update: dict) -> list[VehiclePosition]:
    """Return a new fleet list with *raw_update* merged in by device identity.

    An update for an unknown device is appended.  An update for a known
    device replaces it only when its timestamp is not older than the held
    one, so a late-arriving stale report never moves a marker backwards.
    Unusable updates leave the list unchanged.
    """
    update = vehicle_from_raw(raw_update)
    if update is None:
        _logger.debug("Ignoring live update without device id or timestamp")
        return list(existing)

    merged: list[VehiclePosition] = []
    found = False
    for held in existing:
        if held.device_id != update.device_id:
            merged.append(held)
            continue
        found = True
        if _is_newer_or_equal(update, held):
            merged.append(update)
        else:
            _logger.debug(
                "Stale update for %s (%s < %s) ignored",
                update.device_id, update.timestamp, held.timestamp,
            )
            merged.append(held)

    if not found:
        merged.append(update)
    return merged


def _sort_key(raw: Any) -> tuple[bool, datetime]:
    """Unparseable logs sort before every parseable one."""
    ts = first_present(raw, TIMESTAMP_KEYS) if isinstance(raw, dict) else None
    parsed = parse_timestamp(str(ts)) if ts is not None else None
    if parsed is None:
        return (False, datetime.min)
    return (True, parsed)


def latest_positions(device_groups: list[dict]) -> list[VehiclePosition]:
    """Build a fleet snapshot from polled ``[{deviceId, deviceName, logs}]`` groups.

    The newest log of each group (by timestamp) becomes the device position.
    Devices without logs, and positions with a zero latitude or longitude
    (no GPS fix), are left out.
    """
    positions: list[VehiclePosition] = []
    for group in device_groups:
        if not isinstance(group, dict):
            continue
        logs = group.get("logs") or []
        if not logs:
            continue

        gid = first_present(group, ("deviceId", "id"))
        device_id = str(gid) if gid is not None else None
        gname = first_present(group, ("deviceName", "deviceId"))
        name = str(gname) if gname is not None else "Unknown"

        latest = max(logs, key=_sort_key)
        vehicle = vehicle_from_raw(latest, device_id=device_id, name=name)
        if vehicle is None or vehicle.lat == 0 or vehicle.lng == 0:
            continue
        positions.append(vehicle)
    return positions
