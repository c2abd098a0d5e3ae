"""Tests for the per-trip de-overlap offset."""

from __future__ import annotations

import pytest

from fleet_track.track.models import TrackPoint
from fleet_track.track.offset import TRIP_OFFSET_DEG, apply_trip_offset, trip_offset


def _point(trip_id: int, lat: float = 10.0, lng: float = 20.0) -> TrackPoint:
    return TrackPoint(
        timestamp="2025-03-01 08:00:00",
        date="2025-03-01",
        time="08:00:00",
        lat=lat,
        lng=lng,
        speed_kmh=10.0,
        mileage_km=0.0,
        raw_mileage_km=0.0,
        trip_id=trip_id,
    )


def test_trip_one_is_not_shifted():
    (p,) = apply_trip_offset([_point(1)])
    assert (p.lat, p.lng) == (10.0, 20.0)


@pytest.mark.parametrize("trip_id", [0, 2, 3, 7])
def test_shift_is_diagonal_and_proportional(trip_id):
    (p,) = apply_trip_offset([_point(trip_id)])
    expected = (trip_id - 1) * TRIP_OFFSET_DEG
    assert p.lat - 10.0 == pytest.approx(expected)
    assert p.lng - 20.0 == pytest.approx(expected)


def test_offset_magnitude_is_about_ten_metres():
    # 1e-4 degrees of latitude is ~11 m
    assert 0.00007 <= TRIP_OFFSET_DEG <= 0.0001
    assert trip_offset(2) == pytest.approx(TRIP_OFFSET_DEG)


def test_other_fields_untouched():
    src = _point(3)
    (p,) = apply_trip_offset([src])
    assert p.timestamp == src.timestamp
    assert p.speed_kmh == src.speed_kmh
    assert p.trip_id == 3
