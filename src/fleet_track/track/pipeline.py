"""process_batch: the full raw-records to ProcessedTrack pipeline."""

from __future__ import annotations

import logging

from fleet_track.track.coloring import SpeedSegmentBuilder
from fleet_track.track.models import ProcessedTrack, SpeedThresholds
from fleet_track.track.normalizer import RecordNormalizer, within_dates
from fleet_track.track.offset import apply_trip_offset
from fleet_track.track.segmenter import TripSegmenter
from fleet_track.track.stops import StopDetector

_logger = logging.getLogger(__name__)


def process_batch(
    raw_records: list[dict],
    thresholds: SpeedThresholds | None = None,
    *,
    start_date: str | None = None,
    end_date: str | None = None,
) -> ProcessedTrack:
    """Run normalize → order/segment → offset → {segments, stops}.

    Args:
        raw_records: Position reports, newest first, as delivered by the API.
        thresholds: Speed band cut points; defaults to :class:`SpeedThresholds`.
        start_date: Optional inclusive ``YYYY-MM-DD`` lower bound.
        end_date: Optional inclusive ``YYYY-MM-DD`` upper bound.

    Returns:
        A fresh :class:`ProcessedTrack`; identical inputs always give
        identical output.
    """
    normalized = RecordNormalizer().normalize_all(raw_records)
    dropped = len(raw_records) - len(normalized)
    if dropped:
        _logger.debug("Dropped %d of %d records (wrong type or no timestamp)",
                      dropped, len(raw_records))

    if start_date or end_date:
        normalized = [p for p in normalized if within_dates(p, start_date, end_date)]

    points = apply_trip_offset(TripSegmenter().segment(normalized))
    segments = SpeedSegmentBuilder(thresholds).build(points)
    stops = StopDetector().detect(points)

    _logger.info(
        "Processed batch: %d points, %d segments, %d stops",
        len(points), len(segments), len(stops),
    )
    return ProcessedTrack(points=points, segments=segments, stops=stops)
