"""Pytest configuration and shared fixtures."""

import os
from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing settings
os.environ.update({
    "ENVIRONMENT": "development",
    "ARTNET_ENABLED": "false",  # Do not bind UDP 6454 in unit tests
    "DATASET_PATH": "",  # No start-up auto-load
})


@pytest.fixture
def test_settings():
    """Provide test settings instance."""
    from facebridge.config.settings import Settings
    return Settings(
        _env_file=None,
        artnet_enabled=False,
        dataset_path=None,
    )


@pytest.fixture
def client(test_settings) -> Generator[TestClient, None, None]:
    """Provide FastAPI test client."""
    from facebridge.main import create_app
    with TestClient(create_app(test_settings)) as c:
        yield c


@pytest.fixture
def osc_sink() -> MagicMock:
    """OSC sink double recording every send."""
    sink = MagicMock()
    sink.send.return_value = True
    return sink


@pytest.fixture
def artnet_transport() -> MagicMock:
    """Timecode transport double."""
    transport = MagicMock()
    transport.send_timecode.return_value = True
    return transport


@pytest.fixture
def dataset_payload() -> dict:
    """Small capture: one parameter ramping 0 -> 10 -> 20 over two seconds."""
    return {
        "frames": [
            {"timeMs": 0, "/face/jaw": 0.0},
            {"timeMs": 1000, "/face/jaw": 10.0},
            {"timeMs": 2000, "/face/jaw": 20.0},
        ],
        "triggers": [
            {"timeMs": 1500, "address": "/beyond/cue/1/2/start", "args": [1]},
            {"timeMs": 500, "address": "/beyond/cue/1/1/start"},
            {"timeMs": 2500, "address": "/beyond/cue/1/3/start", "args": []},
        ],
    }
