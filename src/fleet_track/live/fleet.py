"""LiveFleet: in-memory, lock-guarded fleet view fed by polls and pushes."""

from __future__ import annotations

import threading

from fleet_track.live.merge import latest_positions, merge_live_update
from fleet_track.live.models import VehiclePosition


class LiveFleet:
    """Holds the latest position per device.

    Polling snapshots replace the view wholesale; pushed single updates go
    through :func:`~fleet_track.live.merge.merge_live_update`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._positions: list[VehiclePosition] = []

    def positions(self) -> list[VehiclePosition]:
        """Return a copy of the current fleet view."""
        with self._lock:
            return list(self._positions)

    def replace_from_groups(self, device_groups: list[dict]) -> list[VehiclePosition]:
        """Replace the view with a polling snapshot and return it."""
        snapshot = latest_positions(device_groups)
        with self._lock:
            self._positions = snapshot
            return list(snapshot)

    def push(self, raw_update: dict) -> bool:
        """Merge one pushed update.

        Returns True if the view changed (new device or newer position).
        """
        with self._lock:
            before = self._positions
            after = merge_live_update(before, raw_update)
            self._positions = after
            return after != before

    def clear(self) -> None:
        with self._lock:
            self._positions = []
