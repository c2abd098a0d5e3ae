"""Stop (dwell cluster) detection with revisit tagging."""

from __future__ import annotations

from dataclasses import dataclass

from fleet_track.track.models import Stop, TrackPoint

MIN_DWELL_SAMPLES = 5
"""A dwell run needs strictly more samples than this to become a Stop."""

REVISIT_RADIUS_DEG = 0.0005
"""~50 m.  Both |Δlat| and |Δlng| must be below this to count as the same place."""


@dataclass
class _DwellAccumulator:
    lat: float
    lng: float
    start_time: str
    end_time: str
    start_index: int
    count: int = 1


def is_near(a: Stop, lat: float, lng: float, radius_deg: float = REVISIT_RADIUS_DEG) -> bool:
    """True if (*lat*, *lng*) is within *radius_deg* of *a* on both axes."""
    return abs(a.lat - lat) < radius_deg and abs(a.lng - lng) < radius_deg


class StopDetector:
    """Finds runs of zero-speed samples and flags repeated locations.

    Args:
        min_samples: Runs of this many samples or fewer are treated as noise.
        revisit_radius_deg: Per-axis tolerance for the revisit check.
    """

    def __init__(
        self,
        min_samples: int = MIN_DWELL_SAMPLES,
        revisit_radius_deg: float = REVISIT_RADIUS_DEG,
    ) -> None:
        self.min_samples = min_samples
        self.revisit_radius_deg = revisit_radius_deg

    def detect(self, points: list[TrackPoint]) -> list[Stop]:
        """Return committed stops in chronological order.

        The revisit flag is decided at commit time against stops committed
        earlier in the same pass, so the first of several co-located stops
        is never a revisit.
        """
        committed: list[Stop] = []
        acc: _DwellAccumulator | None = None

        for idx, p in enumerate(points):
            if p.is_stopped:
                if acc is None:
                    acc = _DwellAccumulator(
                        lat=p.lat,
                        lng=p.lng,
                        start_time=p.timestamp,
                        end_time=p.timestamp,
                        start_index=idx,
                    )
                else:
                    acc.end_time = p.timestamp
                    acc.count += 1
            else:
                if acc is not None:
                    self._commit(acc, committed)
                acc = None

        if acc is not None:
            self._commit(acc, committed)
        return committed

    def _commit(self, acc: _DwellAccumulator, committed: list[Stop]) -> None:
        if acc.count <= self.min_samples:
            return
        revisit = any(
            is_near(prev, acc.lat, acc.lng, self.revisit_radius_deg) for prev in committed
        )
        committed.append(
            Stop(
                lat=acc.lat,
                lng=acc.lng,
                start_time=acc.start_time,
                end_time=acc.end_time,
                dwell_sample_count=acc.count,
                start_index=acc.start_index,
                is_revisit=revisit,
            )
        )
