"""Speed-band colouring and polyline segment building."""

from __future__ import annotations

from fleet_track.track.models import Segment, SpeedThresholds, TrackPoint

BAND_LOW = "low"
BAND_NORMAL = "normal"
BAND_OVER = "over"
BAND_CRITICAL = "critical"

SPEED_COLORS: dict[str, str] = {
    BAND_LOW: "#3b82f6",       # blue
    BAND_NORMAL: "#22c55e",    # green
    BAND_OVER: "#ef4444",      # red
    BAND_CRITICAL: "#7f1d1d",  # dark red
}


def speed_band(speed_kmh: float, thresholds: SpeedThresholds) -> str:
    """Return the band name for *speed_kmh*.

    ``< low`` → low, ``[low, normal)`` → normal, ``[normal, over)`` → over,
    ``>= over`` → critical.
    """
    if speed_kmh < thresholds.low:
        return BAND_LOW
    if speed_kmh < thresholds.normal:
        return BAND_NORMAL
    if speed_kmh < thresholds.over:
        return BAND_OVER
    return BAND_CRITICAL


class SpeedSegmentBuilder:
    """Splits an ordered point list into colour/trip-homogeneous polylines.

    Args:
        thresholds: Band cut points.  Build a new builder (or call
            :meth:`build` again) whenever they change.
        colors: Band name → colour mapping.
    """

    def __init__(
        self,
        thresholds: SpeedThresholds | None = None,
        colors: dict[str, str] | None = None,
    ) -> None:
        self.thresholds = thresholds or SpeedThresholds()
        self.colors = colors or SPEED_COLORS

    def color_for(self, speed_kmh: float) -> str:
        return self.colors[speed_band(speed_kmh, self.thresholds)]

    def build(self, points: list[TrackPoint]) -> list[Segment]:
        """Return segments in point order.

        A segment opened by a colour or trip change starts with the previous
        point so consecutive polylines share their boundary vertex.  Fewer
        than two points cannot form a line and yield ``[]``.
        """
        if len(points) < 2:
            return []

        first = points[0]
        current = Segment(
            path=[(first.lat, first.lng)],
            color=self.color_for(first.speed_kmh),
            trip_id=first.trip_id,
        )
        segments: list[Segment] = []

        for prev, point in zip(points, points[1:]):
            color = self.color_for(point.speed_kmh)
            if color == current.color and point.trip_id == current.trip_id:
                current.path.append((point.lat, point.lng))
                continue
            segments.append(current)
            current = Segment(
                path=[(prev.lat, prev.lng), (point.lat, point.lng)],
                color=color,
                trip_id=point.trip_id,
            )

        segments.append(current)
        return segments
