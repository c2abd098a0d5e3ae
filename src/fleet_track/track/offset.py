"""Diagonal per-trip offset so repeated routes do not draw on top of each other."""

from __future__ import annotations

import dataclasses

from fleet_track.track.models import TrackPoint

TRIP_OFFSET_DEG = 0.00008  # ~8-10 m


def trip_offset(trip_id: int) -> float:
    """Degrees added to both lat and lng for points of *trip_id*."""
    return (trip_id - 1) * TRIP_OFFSET_DEG


def apply_trip_offset(points: list[TrackPoint]) -> list[TrackPoint]:
    """Return *points* shifted by :func:`trip_offset` of their own trip.

    The shifted coordinates replace the GPS fix; every later stage sees them.
    """
    result: list[TrackPoint] = []
    for p in points:
        delta = trip_offset(p.trip_id)
        result.append(dataclasses.replace(p, lat=p.lat + delta, lng=p.lng + delta))
    return result
