"""Live multi-device map: timestamp-gated merge of pushed and polled positions."""

from fleet_track.live.fleet import LiveFleet
from fleet_track.live.merge import latest_positions, merge_live_update, vehicle_from_raw
from fleet_track.live.models import VehiclePosition

__all__ = [
    "LiveFleet",
    "VehiclePosition",
    "latest_positions",
    "merge_live_update",
    "vehicle_from_raw",
]
