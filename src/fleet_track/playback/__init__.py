"""Track playback: a timer-driven cursor over processed points."""

from fleet_track.playback.clock import DEFAULT_TICK_MS, ClockState, PlaybackClock

__all__ = ["DEFAULT_TICK_MS", "ClockState", "PlaybackClock"]
