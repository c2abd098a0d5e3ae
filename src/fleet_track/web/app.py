"""FastAPI Web application: track processing and live fleet endpoints."""

from __future__ import annotations

import dataclasses
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from fleet_track.config import Settings, configure_logging
from fleet_track.live.fleet import LiveFleet
from fleet_track.live.models import VehiclePosition
from fleet_track.web.schemas import (
    HealthResponse,
    LivePositionsResponse,
    LiveSnapshotRequest,
    LiveUpdateResponse,
    PointRecord,
    ProcessRequest,
    ProcessResponse,
    SegmentRecord,
    StopRecord,
    VehicleRecord,
)
from fleet_track.web.service import TrackService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

_logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

VERSION = "0.1.0"

settings = Settings.from_env()
configure_logging(settings)

app = FastAPI(title="Fleet Track", version=VERSION)

fleet = LiveFleet()


def _vehicle_records(positions: list[VehiclePosition]) -> list[VehicleRecord]:
    return [VehicleRecord(**v.to_dict()) for v in positions]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=VERSION)


@app.post("/api/tracks/process", response_model=ProcessResponse)
def process_track(req: ProcessRequest) -> ProcessResponse:
    """Run the full track pipeline over one batch of raw records."""
    svc = TrackService(settings)
    try:
        track = svc.process(req)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        _logger.exception("Track processing failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return ProcessResponse(
        point_count=len(track.points),
        points=[PointRecord(**p.to_dict()) for p in track.points],
        segments=[SegmentRecord(**dataclasses.asdict(s)) for s in track.segments],
        stops=[StopRecord(**dataclasses.asdict(s)) for s in track.stops],
    )


@app.post("/api/live/snapshot", response_model=LivePositionsResponse)
def live_snapshot(req: LiveSnapshotRequest) -> LivePositionsResponse:
    """Replace the fleet view with the newest log of each polled device."""
    positions = fleet.replace_from_groups(req.groups)
    return LivePositionsResponse(positions=_vehicle_records(positions))


@app.post("/api/live/updates", response_model=LiveUpdateResponse)
def live_update(update: dict) -> LiveUpdateResponse:
    """Merge one pushed position report; stale reports are ignored."""
    accepted = fleet.push(update)
    return LiveUpdateResponse(accepted=accepted, positions=_vehicle_records(fleet.positions()))


@app.get("/api/live/positions", response_model=LivePositionsResponse)
def live_positions() -> LivePositionsResponse:
    return LivePositionsResponse(positions=_vehicle_records(fleet.positions()))
