"""GPS track post-processing: normalize, segment, colour, detect stops.

Public API
----------
process_batch        - raw records → ProcessedTrack (full pipeline)
RecordNormalizer     - raw dict → TrackPoint
TripSegmenter        - newest-first → chronological with trip ids
apply_trip_offset    - per-trip diagonal de-overlap shift
SpeedSegmentBuilder  - points → coloured polyline segments
StopDetector         - points → dwell stops with revisit flags
"""

from fleet_track.track.coloring import SPEED_COLORS, SpeedSegmentBuilder, speed_band
from fleet_track.track.models import (
    MOVING,
    STOPPED,
    ProcessedTrack,
    Segment,
    SpeedThresholds,
    Stop,
    TrackPoint,
)
from fleet_track.track.normalizer import RecordNormalizer, flatten_records
from fleet_track.track.offset import TRIP_OFFSET_DEG, apply_trip_offset
from fleet_track.track.pipeline import process_batch
from fleet_track.track.segmenter import TripSegmenter, TripState, advance_trip
from fleet_track.track.stops import MIN_DWELL_SAMPLES, REVISIT_RADIUS_DEG, StopDetector

__all__ = [
    "MIN_DWELL_SAMPLES",
    "MOVING",
    "REVISIT_RADIUS_DEG",
    "SPEED_COLORS",
    "STOPPED",
    "TRIP_OFFSET_DEG",
    "ProcessedTrack",
    "RecordNormalizer",
    "Segment",
    "SpeedSegmentBuilder",
    "SpeedThresholds",
    "Stop",
    "StopDetector",
    "TrackPoint",
    "TripSegmenter",
    "TripState",
    "advance_trip",
    "apply_trip_offset",
    "flatten_records",
    "process_batch",
    "speed_band",
]
