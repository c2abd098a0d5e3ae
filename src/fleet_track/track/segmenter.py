"""Chronological ordering and trip segmentation."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from fleet_track.track.models import TrackPoint


@dataclass(frozen=True)
class TripState:
    """Fold state carried through one linear scan of the ordered points."""

    trip_count: int = 0
    stopped: bool = True


def advance_trip(state: TripState, speed_kmh: float) -> TripState:
    """Return the state after observing one point with *speed_kmh*.

    Movement while stopped opens a new trip; a zero speed marks the vehicle
    stopped again.  Any other point leaves the state untouched.
    """
    if speed_kmh > 0 and state.stopped:
        return TripState(trip_count=state.trip_count + 1, stopped=False)
    if speed_kmh == 0:
        return TripState(trip_count=state.trip_count, stopped=True)
    return state


class TripSegmenter:
    """Orders a newest-first point list chronologically and assigns trip ids.

    Ordering is a plain reversal of the feed order, not a timestamp sort.
    Sources deliver newest-first; out-of-order feeds are not corrected.
    """

    def segment(self, newest_first: list[TrackPoint]) -> list[TrackPoint]:
        """Return the points oldest-first with ``trip_id`` and ``sequence_id`` set.

        ``trip_id`` is the trip count *after* the point has been folded in,
        so a batch that starts moving begins with trip 1 and a fully
        stationary batch stays at trip 0.
        """
        state = TripState()
        result: list[TrackPoint] = []
        for seq, point in enumerate(reversed(newest_first), start=1):
            state = advance_trip(state, point.speed_kmh)
            result.append(
                dataclasses.replace(point, sequence_id=seq, trip_id=state.trip_count)
            )
        return result
