"""TrackService: wraps the processing pipeline for the Web API."""

from __future__ import annotations

from fleet_track.config import Settings
from fleet_track.track.models import ProcessedTrack, SpeedThresholds
from fleet_track.track.normalizer import flatten_records
from fleet_track.track.pipeline import process_batch
from fleet_track.web.schemas import ProcessRequest


class TrackService:
    """Runs :func:`~fleet_track.track.pipeline.process_batch` for HTTP callers.

    Parameters
    ----------
    settings:
        Supplies default speed thresholds when a request carries none.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()

    def process(self, req: ProcessRequest) -> ProcessedTrack:
        """Normalize, segment and annotate the records in *req*.

        Raises
        ------
        ValueError
            If the request carries neither ``records`` nor ``payload``.
        """
        if req.records is not None:
            records = req.records
        elif req.payload is not None:
            records = flatten_records(req.payload)
        else:
            raise ValueError("Request must include 'records' or 'payload'")

        if req.thresholds is not None:
            thresholds = SpeedThresholds(
                low=req.thresholds.low,
                normal=req.thresholds.normal,
                over=req.thresholds.over,
            )
        else:
            thresholds = self._settings.thresholds

        return process_batch(
            records,
            thresholds,
            start_date=req.start_date,
            end_date=req.end_date,
        )
