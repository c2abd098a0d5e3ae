"""PlaybackClock: timer-driven cursor over a processed track."""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable

from fleet_track.timeutils import format_duration, seconds_between
from fleet_track.track.models import TrackPoint

_logger = logging.getLogger(__name__)

DEFAULT_TICK_MS = 1000


class ClockState(enum.Enum):
    IDLE = "idle"
    PLAYING = "playing"


class PlaybackClock:
    """Advances a cursor index over an immutable point list on a fixed tick.

    While :attr:`state` is ``PLAYING`` a background thread calls
    :meth:`tick` every *tick_interval_ms*.  At most one timer thread exists
    at any time: it is cancelled on pause, reset, interval change, point
    list replacement, auto-stop at the end of the track and :meth:`close`.

    ``reset()`` rewinds to 0 *and* stops playback.

    Parameters
    ----------
    points:
        Ordered track points (usually ``ProcessedTrack.points``).
    tick_interval_ms:
        Milliseconds between two cursor advances.
    """

    def __init__(
        self,
        points: list[TrackPoint] | None = None,
        tick_interval_ms: int = DEFAULT_TICK_MS,
    ) -> None:
        self._validate_interval(tick_interval_ms)
        self._points: list[TrackPoint] = list(points or [])
        self._interval_ms = tick_interval_ms
        self._cursor = 0
        self._state = ClockState.IDLE
        self._lock = threading.RLock()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._callbacks: list[Callable[[int], None]] = []

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> PlaybackClock:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API: transitions
    # ------------------------------------------------------------------

    def play(self) -> bool:
        """Start auto-advancing.

        Returns False (and stays idle) when there is nothing left to play:
        fewer than two points, or the cursor already on the last point.
        """
        with self._lock:
            if self._state is ClockState.PLAYING:
                return True
            if self._cursor >= self._last_index():
                return False
            self._state = ClockState.PLAYING
            self._start_timer()
        _logger.debug("Playback started at cursor %d", self._cursor)
        return True

    def pause(self) -> None:
        """Stop auto-advancing; the cursor stays where it is."""
        self._stop()

    def reset(self) -> None:
        """Rewind the cursor to 0 and go idle."""
        self._stop()
        with self._lock:
            self._cursor = 0

    def set_tick_interval_ms(self, interval_ms: int) -> None:
        """Change the tick interval.  A running timer is restarted with it.

        Raises
        ------
        ValueError
            If *interval_ms* is not positive.
        """
        self._validate_interval(interval_ms)
        with self._lock:
            self._interval_ms = interval_ms
            old = None
            if self._state is ClockState.PLAYING:
                old = self._detach_timer()
                self._start_timer()
        self._join(old)

    def set_points(self, points: list[TrackPoint]) -> None:
        """Replace the point list (new fetch/poll/push); rewinds and stops."""
        self._stop()
        with self._lock:
            self._points = list(points)
            self._cursor = 0

    def seek(self, index: int) -> None:
        """Move the cursor to *index*, clamped to the valid range."""
        with self._lock:
            self._cursor = min(max(0, index), max(0, len(self._points) - 1))

    def tick(self) -> bool:
        """Advance one step if playing.

        Reaching the last index switches the clock to idle.  Returns True if
        the cursor moved.
        """
        with self._lock:
            cursor = self._advance()
        if cursor is None:
            return False
        self._notify(cursor)
        return True

    def register_callback(self, callback: Callable[[int], None]) -> None:
        """Register *callback* to receive the new cursor after every advance."""
        self._callbacks.append(callback)

    def close(self) -> None:
        """Stop playback and release the timer thread."""
        self._stop()

    # ------------------------------------------------------------------
    # Public API: queries
    # ------------------------------------------------------------------

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is ClockState.PLAYING

    @property
    def tick_interval_ms(self) -> int:
        return self._interval_ms

    @property
    def timer_running(self) -> bool:
        """True while a timer thread is alive."""
        thread = self._thread
        return thread is not None and thread.is_alive()

    def current_point(self) -> TrackPoint | None:
        """Return the point under the cursor, or None for an empty track."""
        with self._lock:
            if not self._points:
                return None
            return self._points[self._cursor]

    def progress(self) -> float:
        """Return ``cursor / (len - 1)`` in [0, 1]; 0.0 for fewer than two points."""
        with self._lock:
            last = self._last_index()
            if last <= 0:
                return 0.0
            return self._cursor / last

    def duration_at(self, index: int) -> float:
        """Seconds spent in the current movement state up to *index*.

        Walks back from *index* while points share its movement status and
        trip id, then measures the time from the start of that run to
        *index*.  Out-of-range indices give 0.0.
        """
        points = self._points
        if index < 0 or index >= len(points):
            return 0.0
        current = points[index]
        first = index
        for i in range(index - 1, -1, -1):
            p = points[i]
            if p.movement_status != current.movement_status or p.trip_id != current.trip_id:
                break
            first = i
        return seconds_between(points[first].timestamp, current.timestamp)

    def duration_string(self, index: int) -> str:
        """:meth:`duration_at` formatted as ``"1h 5m 3s"``."""
        return format_duration(self.duration_at(index))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_interval(interval_ms: int) -> None:
        if interval_ms <= 0:
            raise ValueError(f"tick interval must be positive, got {interval_ms!r}")

    def _last_index(self) -> int:
        return len(self._points) - 1

    def _stop(self) -> None:
        with self._lock:
            if self._state is ClockState.PLAYING:
                _logger.debug("Playback stopped at cursor %d", self._cursor)
            self._state = ClockState.IDLE
            thread = self._detach_timer()
        self._join(thread)

    def _advance(self) -> int | None:
        """Move one step; caller holds the lock.  Returns the new cursor or None."""
        if self._state is not ClockState.PLAYING:
            return None
        last = self._last_index()
        if self._cursor >= last:
            self._go_idle()
            return None
        self._cursor += 1
        if self._cursor >= last:
            self._go_idle()
        return self._cursor

    def _notify(self, cursor: int) -> None:
        for cb in list(self._callbacks):
            cb(cursor)

    def _go_idle(self) -> None:
        """Auto-stop at the end of the track (may run on the timer thread)."""
        self._state = ClockState.IDLE
        if self._stop_event is not None:
            self._stop_event.set()
        _logger.debug("Playback reached the end at cursor %d", self._cursor)

    def _start_timer(self) -> None:
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run,
            args=(stop_event, self._interval_ms / 1000.0),
            daemon=True,
            name="PlaybackClock",
        )
        self._thread.start()

    def _detach_timer(self) -> threading.Thread | None:
        """Signal the running timer to exit; caller holds the lock and joins afterwards."""
        stop_event, thread = self._stop_event, self._thread
        self._stop_event = None
        self._thread = None
        if stop_event is not None:
            stop_event.set()
        return thread

    @staticmethod
    def _join(thread: threading.Thread | None) -> None:
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)

    def _run(self, stop_event: threading.Event, interval_s: float) -> None:
        while not stop_event.wait(interval_s):
            with self._lock:
                # A cancelled timer must never move the cursor.
                if stop_event.is_set():
                    return
                cursor = self._advance()
            if cursor is not None:
                self._notify(cursor)
