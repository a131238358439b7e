"""Shared fixtures for the unit tests."""

from __future__ import annotations

import pytest


@pytest.fixture
def sample_records() -> list[dict]:
    return [
        {"timestamp": "2024-01-03T00:00:00", "prediction": 12.0, "actual": 11.0, "load": 4.0},
        {"timestamp": "2024-01-01T00:00:00", "prediction": "10", "actual": 10.0, "load": 2.0},
        {"timestamp": "2024-01-02T00:00:00", "prediction": 11.0, "actual": None, "load": ""},
        {"timestamp": "2024-01-04T00:00:00", "prediction": 13.0, "actual": 14.0, "load": 8.0},
    ]
