"""Tests for the browser WebSocket endpoint.

Tests cover:
- Status on connect at both paths
- Mode and dataset echoes
- Malformed messages keep the connection open
- Errors reach only the session that caused them
"""

import json

import pytest
from fastapi.testclient import TestClient


class TestBridgeWebSocket:
    """Test suite for the session endpoint."""

    @pytest.mark.parametrize("path", ["/", "/ws"])
    def test_status_on_connect(self, client: TestClient, path):
        """Every new client gets the current status first."""
        with client.websocket_connect(path) as ws:
            assert ws.receive_json() == {
                "type": "status",
                "tcMode": "send",
                "loaded": False,
                "frames": 0,
            }

    def test_tc_mode_echo(self, client: TestClient):
        """tcMode is echoed to observers."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            ws.send_text(json.dumps({"type": "tcMode", "mode": "receive", "fps": 25}))

            assert ws.receive_json() == {"type": "tcMode", "mode": "receive"}

        assert client.get("/status").json()["fps"] == 25.0

    def test_load_data_echo(self, client: TestClient, dataset_payload):
        """loadData is acknowledged with the frame count."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            ws.send_json({"type": "loadData", "data": dataset_payload})

            assert ws.receive_json() == {"type": "dataLoaded", "frames": 3}

        status = client.get("/status").json()
        assert status["loaded"] is True
        assert status["frames"] == 3

    def test_malformed_message_keeps_connection(self, client: TestClient):
        """Garbage is dropped and the session carries on."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            ws.send_text("not json at all")
            ws.send_json({"type": "unknown"})
            ws.send_json({"type": "tcMode", "mode": "off"})

            assert ws.receive_json() == {"type": "tcMode", "mode": "off"}

    def test_failed_load_reports_error(self, client: TestClient):
        """A rejected dataset is reported back to the sender."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            ws.send_json({"type": "loadData", "data": {"frames": []}})

            message = ws.receive_json()
            assert message["type"] == "error"
            assert "no frames" in message["message"]

    def test_error_not_broadcast(self, client: TestClient):
        """Other sessions never see an error they did not cause."""
        with client.websocket_connect("/ws") as sender, client.websocket_connect("/ws") as other:
            sender.receive_json()
            other.receive_json()

            sender.send_json({"type": "loadData", "data": {"frames": []}})
            assert sender.receive_json()["type"] == "error"

            other.send_json({"type": "tcMode", "mode": "off"})
            assert other.receive_json() == {"type": "tcMode", "mode": "off"}
            assert sender.receive_json() == {"type": "tcMode", "mode": "off"}
