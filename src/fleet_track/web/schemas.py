"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ThresholdsModel(BaseModel):
    low: float = 20.0
    normal: float = 80.0
    over: float = 120.0


class ProcessRequest(BaseModel):
    """Either ``records`` (flat, newest first) or ``payload`` (a raw packets
    API response, flattened server-side) must be given."""

    records: list[dict[str, Any]] | None = None
    payload: Any = None
    thresholds: ThresholdsModel | None = None
    start_date: str | None = None
    end_date: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str


class PointRecord(BaseModel):
    sequence_id: int
    timestamp: str
    date: str
    time: str
    lat: float
    lng: float
    speed_kmh: float
    movement_status: str
    mileage_km: float
    raw_mileage_km: float
    trip_id: int


class SegmentRecord(BaseModel):
    path: list[tuple[float, float]]
    color: str
    trip_id: int


class StopRecord(BaseModel):
    lat: float
    lng: float
    start_time: str
    end_time: str
    dwell_sample_count: int
    start_index: int
    is_revisit: bool


class ProcessResponse(BaseModel):
    point_count: int
    points: list[PointRecord]
    segments: list[SegmentRecord]
    stops: list[StopRecord]


class VehicleRecord(BaseModel):
    device_id: str
    name: str
    lat: float
    lng: float
    speed_kmh: float
    heading: float
    timestamp: str
    movement_status: str


class LiveSnapshotRequest(BaseModel):
    groups: list[dict[str, Any]]


class LiveUpdateResponse(BaseModel):
    accepted: bool
    positions: list[VehicleRecord]


class LivePositionsResponse(BaseModel):
    positions: list[VehicleRecord]
