"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fleet_track.web.app import app, fleet


@pytest.fixture
def client():
    """FastAPI test client over an empty live fleet."""
    fleet.clear()
    with TestClient(app) as c:
        yield c
    fleet.clear()
