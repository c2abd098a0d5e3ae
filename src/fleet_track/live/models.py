"""Live fleet data models."""

from __future__ import annotations

from dataclasses import dataclass

from fleet_track.track.models import MOVING, STOPPED


@dataclass(frozen=True)
class VehiclePosition:
    """The latest known position of one device on the live map."""

    device_id: str
    name: str
    lat: float
    lng: float
    speed_kmh: float
    heading: float
    """Azimuth in degrees, 0 = north."""

    timestamp: str

    @property
    def movement_status(self) -> str:
        return MOVING if self.speed_kmh > 0 else STOPPED

    def to_dict(self) -> dict:
        return {
            "device_id": self.device_id,
            "name": self.name,
            "lat": self.lat,
            "lng": self.lng,
            "speed_kmh": self.speed_kmh,
            "heading": self.heading,
            "timestamp": self.timestamp,
            "movement_status": self.movement_status,
        }
