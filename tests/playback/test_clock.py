"""Tests for PlaybackClock: transitions, timer lifetime, duration queries."""

from __future__ import annotations

import dataclasses
import threading
import time

import pytest

from fleet_track.playback.clock import ClockState, PlaybackClock
from fleet_track.track.models import TrackPoint

SLOW_MS = 60_000  # long enough that the background timer never fires during a test


def _points(specs: list[tuple[str, float, int]]) -> list[TrackPoint]:
    """Build points from ``(HH:MM:SS, speed, trip_id)`` triples."""
    return [
        TrackPoint(
            timestamp=f"2025-03-01 {t}",
            date="2025-03-01",
            time=t,
            lat=51.5,
            lng=0.07,
            speed_kmh=speed,
            mileage_km=0.0,
            raw_mileage_km=0.0,
            sequence_id=i + 1,
            trip_id=trip,
        )
        for i, (t, speed, trip) in enumerate(specs)
    ]


def _n_points(n: int) -> list[TrackPoint]:
    return _points([(f"08:00:{i:02d}", 10.0, 1) for i in range(n)])


def _clock_threads() -> int:
    return sum(1 for t in threading.enumerate() if t.name == "PlaybackClock")


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def test_initial_state():
    with PlaybackClock(_n_points(3)) as clock:
        assert clock.state is ClockState.IDLE
        assert clock.cursor == 0
        assert clock.tick_interval_ms == 1000
        assert clock.timer_running is False


def test_ticks_stop_at_last_index():
    """Ten ticks over five points end on index 4, idle, without over-running."""
    with PlaybackClock(_n_points(5), tick_interval_ms=SLOW_MS) as clock:
        assert clock.play() is True
        for _ in range(10):
            clock.tick()
        assert clock.cursor == 4
        assert clock.state is ClockState.IDLE


def test_tick_while_idle_does_nothing():
    with PlaybackClock(_n_points(5)) as clock:
        assert clock.tick() is False
        assert clock.cursor == 0


@pytest.mark.parametrize("n", [0, 1])
def test_play_needs_two_points(n):
    with PlaybackClock(_n_points(n), tick_interval_ms=SLOW_MS) as clock:
        assert clock.play() is False
        assert clock.state is ClockState.IDLE
        assert clock.timer_running is False


def test_play_at_end_is_refused():
    with PlaybackClock(_n_points(3), tick_interval_ms=SLOW_MS) as clock:
        clock.seek(2)
        assert clock.play() is False


def test_pause_keeps_cursor():
    with PlaybackClock(_n_points(5), tick_interval_ms=SLOW_MS) as clock:
        clock.play()
        clock.tick()
        clock.tick()
        clock.pause()
        assert clock.cursor == 2
        assert clock.state is ClockState.IDLE
        assert clock.timer_running is False


def test_reset_rewinds_and_stops():
    with PlaybackClock(_n_points(5), tick_interval_ms=SLOW_MS) as clock:
        clock.play()
        clock.tick()
        clock.reset()
        assert clock.cursor == 0
        assert clock.state is ClockState.IDLE
        assert clock.timer_running is False


def test_set_points_rewinds_and_stops():
    with PlaybackClock(_n_points(10), tick_interval_ms=SLOW_MS) as clock:
        clock.play()
        for _ in range(7):
            clock.tick()
        clock.set_points(_n_points(3))
        assert clock.cursor == 0
        assert clock.state is ClockState.IDLE
        assert clock.timer_running is False
        assert clock.current_point().time == "08:00:00"


def test_seek_is_clamped():
    with PlaybackClock(_n_points(4)) as clock:
        clock.seek(99)
        assert clock.cursor == 3
        clock.seek(-5)
        assert clock.cursor == 0


@pytest.mark.parametrize("bad", [0, -1])
def test_invalid_interval_rejected(bad):
    with pytest.raises(ValueError):
        PlaybackClock(_n_points(2), tick_interval_ms=bad)
    with PlaybackClock(_n_points(2)) as clock:
        with pytest.raises(ValueError):
            clock.set_tick_interval_ms(bad)


def test_callbacks_receive_cursor():
    seen: list[int] = []
    with PlaybackClock(_n_points(4), tick_interval_ms=SLOW_MS) as clock:
        clock.register_callback(seen.append)
        clock.play()
        while clock.tick():
            pass
    assert seen == [1, 2, 3]


# ---------------------------------------------------------------------------
# Timer lifetime
# ---------------------------------------------------------------------------


def test_timer_plays_to_the_end():
    done = threading.Event()
    with PlaybackClock(_n_points(6), tick_interval_ms=5) as clock:
        clock.register_callback(lambda c: done.set() if c == 5 else None)
        clock.play()
        assert done.wait(timeout=5.0)
        assert clock.cursor == 5
        assert clock.state is ClockState.IDLE


def test_interval_change_never_leaves_two_timers():
    before = _clock_threads()
    with PlaybackClock(_n_points(50), tick_interval_ms=SLOW_MS) as clock:
        clock.play()
        for ms in (40_000, 30_000, 20_000):
            clock.set_tick_interval_ms(ms)
            assert _clock_threads() - before <= 1
        assert clock.is_playing
        assert clock.tick_interval_ms == 20_000
    assert clock.timer_running is False


def test_interval_change_while_idle_does_not_start_timer():
    with PlaybackClock(_n_points(5)) as clock:
        clock.set_tick_interval_ms(10)
        assert clock.timer_running is False
        assert clock.state is ClockState.IDLE


def test_repeated_play_starts_one_timer():
    before = _clock_threads()
    with PlaybackClock(_n_points(5), tick_interval_ms=SLOW_MS) as clock:
        clock.play()
        clock.play()
        clock.play()
        assert _clock_threads() - before <= 1


def test_paused_timer_never_advances():
    with PlaybackClock(_n_points(100), tick_interval_ms=5) as clock:
        clock.play()
        time.sleep(0.03)
        clock.pause()
        frozen = clock.cursor
        time.sleep(0.05)
        assert clock.cursor == frozen


def test_close_releases_timer():
    clock = PlaybackClock(_n_points(5), tick_interval_ms=SLOW_MS)
    clock.play()
    assert clock.timer_running is True
    clock.close()
    assert clock.timer_running is False
    assert clock.state is ClockState.IDLE


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def test_progress_fraction():
    with PlaybackClock(_n_points(5), tick_interval_ms=SLOW_MS) as clock:
        assert clock.progress() == 0.0
        clock.seek(2)
        assert clock.progress() == pytest.approx(0.5)
        clock.seek(4)
        assert clock.progress() == pytest.approx(1.0)


def test_progress_and_current_point_on_empty_track():
    with PlaybackClock([]) as clock:
        assert clock.progress() == 0.0
        assert clock.current_point() is None


DURATION_TRACK = [
    ("08:00:00", 0.0, 0),
    ("08:00:30", 0.0, 0),
    ("08:01:00", 20.0, 1),   # trip 1 starts
    ("08:03:05", 40.0, 1),
    ("09:04:10", 60.0, 1),
    ("09:05:00", 0.0, 1),    # stopped again, same trip
    ("09:05:45", 0.0, 1),
]


@pytest.mark.parametrize("index,seconds,text", [
    (0, 0, "0s"),
    (1, 30, "30s"),
    (2, 0, "0s"),
    (3, 125, "2m 5s"),
    (4, 3790, "1h 3m 10s"),
    (5, 0, "0s"),
    (6, 45, "45s"),
])
def test_duration_of_current_state(index, seconds, text):
    with PlaybackClock(_points(DURATION_TRACK)) as clock:
        assert clock.duration_at(index) == pytest.approx(seconds)
        assert clock.duration_string(index) == text


def test_duration_run_breaks_on_trip_change():
    pts = _points([("08:00:00", 10.0, 1), ("08:00:20", 10.0, 2), ("08:00:50", 10.0, 2)])
    with PlaybackClock(pts) as clock:
        assert clock.duration_at(2) == pytest.approx(30)


@pytest.mark.parametrize("index", [-1, 7, 100])
def test_duration_out_of_range(index):
    with PlaybackClock(_points(DURATION_TRACK)) as clock:
        assert clock.duration_at(index) == 0.0
        assert clock.duration_string(index) == "0s"


def test_duration_across_naive_and_offset_timestamps():
    pts = [
        dataclasses.replace(p, timestamp=ts)
        for p, ts in zip(
            _n_points(3),
            ["2025-03-01T08:00:00Z", "2025-03-01 08:00:20", "2025-03-01T09:01:05+01:00"],
        )
    ]
    with PlaybackClock(pts) as clock:
        assert clock.duration_string(1) == "20s"
        assert clock.duration_string(2) == "1m 5s"
