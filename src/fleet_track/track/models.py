"""Track data models."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field

MOVING = "Moving"
STOPPED = "Stopped"


@dataclass(frozen=True)
class TrackPoint:
    """A single canonical GPS position report.

    ``sequence_id`` and ``trip_id`` are 0 until the point has been through
    :class:`~fleet_track.track.segmenter.TripSegmenter`.
    """

    timestamp: str
    """Combined ``"YYYY-MM-DD HH:MM:SS"`` string; source of truth for ordering."""

    date: str
    """Date half of ``timestamp``."""

    time: str
    """Time half of ``timestamp`` (``""`` when the source carried only a date)."""

    lat: float
    """Latitude in decimal degrees (trip-offset applied after processing)."""

    lng: float
    """Longitude in decimal degrees (trip-offset applied after processing)."""

    speed_kmh: float
    """Ground speed in km/h. Clamped to >= 0."""

    mileage_km: float
    """Odometer reading in km, rounded to one decimal place."""

    raw_mileage_km: float
    """Unrounded odometer reading in km."""

    sequence_id: int = 0
    """1-based position in the chronologically ordered batch."""

    trip_id: int = 0
    """Movement episode number; 0 before the first movement of the batch."""

    @property
    def movement_status(self) -> str:
        """``'Moving'`` when ``speed_kmh > 0``, else ``'Stopped'``."""
        return MOVING if self.speed_kmh > 0 else STOPPED

    @property
    def is_stopped(self) -> bool:
        return self.speed_kmh == 0

    def to_dict(self) -> dict:
        d = dataclasses.asdict(self)
        d["movement_status"] = self.movement_status
        return d


@dataclass(frozen=True)
class SpeedThresholds:
    """Three km/h cut points that split speeds into four colour bands.

    Not validated: ``low >= normal`` simply yields an empty band.
    """

    low: float = 20.0
    normal: float = 80.0
    over: float = 120.0


@dataclass
class Segment:
    """A contiguous polyline run sharing one speed colour and one trip."""

    path: list[tuple[float, float]]
    """Ordered ``(lat, lng)`` pairs.  Starts with the previous run's last point
    when the run was opened by a colour or trip change."""

    color: str
    trip_id: int


@dataclass
class Stop:
    """A dwell cluster long enough to count as a stop."""

    lat: float
    """Latitude of the first sample of the dwell run."""

    lng: float
    """Longitude of the first sample of the dwell run."""

    start_time: str
    end_time: str
    dwell_sample_count: int

    start_index: int
    """0-based index of the first dwell sample in the processed point list."""

    is_revisit: bool = False
    """True if an earlier stop in the same batch lies within the revisit radius."""


@dataclass
class ProcessedTrack:
    """Result of one full pipeline run.  Replaced wholesale on the next batch."""

    points: list[TrackPoint] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)
    stops: list[Stop] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict."""
        return {
            "points": [p.to_dict() for p in self.points],
            "segments": [dataclasses.asdict(s) for s in self.segments],
            "stops": [dataclasses.asdict(s) for s in self.stops],
        }
