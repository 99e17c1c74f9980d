"""
==============================================================================
API Integration Tests
==============================================================================

Tests for REST API endpoints and the scan WebSocket.

==============================================================================
"""

import base64
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from barcodelink.main import Application


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client: TestClient):
        """Test health check returns status."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["database"] == "healthy"
        assert data["components"]["network"] == "online"

    def test_readiness_probe(self, client: TestClient):
        """Test readiness probe."""
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["ready"] is True

    def test_liveness_probe(self, client: TestClient):
        """Test liveness probe."""
        response = client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["alive"] is True


class TestSessionEndpoints:
    """Tests for capture session endpoints."""

    def test_session_starts_idle(self, client: TestClient):
        response = client.get("/api/v1/session")
        assert response.status_code == 200
        assert response.json()["status"] == "idle"

    def test_series_flow(self, client: TestClient):
        """Test start, scan and stop in series mode."""
        response = client.post("/api/v1/session/start", json={"mode": "series"})
        assert response.status_code == 200
        assert response.json()["status"] == "capturing"
        assert response.json()["mode"] == "series"

        for code in ["123", "456"]:
            response = client.post("/api/v1/session/scan", json={"code": code})
            assert response.status_code == 200
            assert response.json()["outcome"] == "accepted"

        response = client.post("/api/v1/session/scan", json={"code": "456"})
        assert response.json()["outcome"] == "debounced"

        response = client.post("/api/v1/session/stop")
        assert response.status_code == 200
        assert response.json()["status"] == "idle"
        assert response.json()["entries"] == 2

    def test_scan_response_includes_entry(self, client: TestClient):
        client.post("/api/v1/session/start", json={"mode": "single"})

        response = client.post("/api/v1/session/scan", json={"code": "  789  "})

        data = response.json()
        assert data["accepted"] is True
        assert data["code"] == "789"
        assert data["entry"]["quantity"] == 1
        assert data["entry"]["synced"] is False

    def test_empty_code_is_silent(self, client: TestClient):
        client.post("/api/v1/session/start", json={"mode": "single"})

        response = client.post("/api/v1/session/scan", json={"code": "   "})

        assert response.status_code == 200
        assert response.json()["outcome"] == "rejected_empty"
        assert client.get("/api/v1/ledger").json()["total"] == 0

    def test_scan_while_idle_ignored(self, client: TestClient):
        response = client.post("/api/v1/session/scan", json={"code": "123"})
        assert response.status_code == 200
        assert response.json()["outcome"] == "ignored_idle"

    def test_double_start_conflict(self, client: TestClient):
        client.post("/api/v1/session/start", json={"mode": "single"})

        response = client.post("/api/v1/session/start", json={"mode": "series"})

        assert response.status_code == 409
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "SESSION_ALREADY_ACTIVE"

    def test_stop_while_idle_conflict(self, client: TestClient):
        response = client.post("/api/v1/session/stop")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SESSION_NOT_ACTIVE"

    def test_invalid_mode_rejected(self, client: TestClient):
        response = client.post("/api/v1/session/start", json={"mode": "batch"})
        assert response.status_code == 422

    def test_decode_invalid_image(self, client: TestClient):
        client.post("/api/v1/session/start", json={"mode": "single"})
        image = base64.b64encode(b"not an image").decode()

        response = client.post("/api/v1/session/decode", json={"image": image})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_IMAGE"


class TestLedgerEndpoints:
    """Tests for ledger listing, export and clear."""

    @pytest.fixture
    def scanned(self, client: TestClient) -> TestClient:
        client.post("/api/v1/session/start", json={"mode": "series"})
        for code in ["123", "456"]:
            client.post("/api/v1/session/scan", json={"code": code})
        return client

    def test_ledger_most_recent_first(self, scanned: TestClient):
        data = scanned.get("/api/v1/ledger").json()
        assert data["total"] == 2
        assert data["unsynced"] == 2
        assert [e["code"] for e in data["entries"]] == ["456", "123"]

    def test_export_download(self, scanned: TestClient):
        response = scanned.get("/api/v1/ledger/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "scan_export_" in response.headers["content-disposition"]

        lines = response.text.split("\n")
        assert [line.split("\t")[0] for line in lines] == ["456", "123"]
        assert all(line.split("\t")[2].endswith("Z") for line in lines)

    def test_export_to_directory(self, scanned: TestClient, settings):
        response = scanned.post("/api/v1/ledger/export")

        assert response.status_code == 200
        path = Path(response.json()["path"])
        assert path.parent == settings.export_path
        assert path.read_text(encoding="utf-8").count("\n") == 1

    def test_clear(self, scanned: TestClient):
        response = scanned.delete("/api/v1/ledger")
        assert response.status_code == 200
        assert scanned.get("/api/v1/ledger").json()["total"] == 0


class TestSyncEndpoints:
    """Tests for sync, connectivity and settings."""

    def test_empty_ledger_sync(self, client: TestClient, remote_file: Path):
        response = client.post("/api/v1/sync")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "SYNC_EMPTY_LEDGER"
        assert not remote_file.exists()

    def test_sync_to_file_target(self, client: TestClient, remote_file: Path):
        client.post("/api/v1/session/start", json={"mode": "series"})
        client.post("/api/v1/session/scan", json={"code": "123"})

        response = client.post("/api/v1/sync")

        assert response.status_code == 200
        data = response.json()
        assert data["sent"] == 1
        assert data["marked"] == 1
        assert data["unsynced"] == 0
        assert remote_file.read_text(encoding="utf-8").startswith("123\t1\t")

        status = client.get("/api/v1/sync/status").json()
        assert status["last_outcome"] == "success"
        assert status["in_flight"] is False

    def test_offline_sync(self, client: TestClient):
        client.post("/api/v1/session/start", json={"mode": "series"})
        client.post("/api/v1/session/scan", json={"code": "123"})

        response = client.put("/api/v1/connectivity", json={"online": False})
        assert response.json()["online"] is False

        response = client.post("/api/v1/sync")
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "SYNC_OFFLINE"
        assert client.get("/api/v1/ledger").json()["unsynced"] == 1

    def test_transport_error_leaves_ledger_unsynced(self, client: TestClient, tmp_path: Path):
        client.put(
            "/api/v1/settings",
            json={"remote_target": str(tmp_path / "no-such-dir" / "scans.txt")}
        )
        client.post("/api/v1/session/start", json={"mode": "series"})
        client.post("/api/v1/session/scan", json={"code": "123"})

        response = client.post("/api/v1/sync")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "SYNC_TRANSPORT_ERROR"
        assert client.get("/api/v1/ledger").json()["unsynced"] == 1

    def test_settings_update(self, client: TestClient, remote_file: Path):
        data = client.get("/api/v1/settings").json()
        assert data["remote_target"] == str(remote_file)
        assert data["auto_sync"] is False

        response = client.put(
            "/api/v1/settings",
            json={"auto_sync": True, "device_id": "  DEV-77 "}
        )

        assert response.status_code == 200
        assert response.json()["auto_sync"] is True
        assert response.json()["device_id"] == "DEV-77"
        assert response.json()["remote_target"] == str(remote_file)


class TestRestartRecovery:
    """Tests for state surviving an application restart."""

    def test_ledger_and_settings_survive_restart(self, settings):
        with TestClient(Application(settings).app) as client:
            client.post("/api/v1/session/start", json={"mode": "series"})
            client.post("/api/v1/session/scan", json={"code": "123"})
            client.put("/api/v1/settings", json={"device_id": "DEV-5"})

        with TestClient(Application(settings).app) as client:
            assert client.get("/api/v1/session").json()["status"] == "idle"
            assert [e["code"] for e in client.get("/api/v1/ledger").json()["entries"]] == ["123"]
            assert client.get("/api/v1/settings").json()["device_id"] == "DEV-5"


class TestScannerWebSocket:
    """Tests for the /ws/scan channel."""

    def test_manual_scans_over_websocket(self, client: TestClient):
        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({"type": "init", "mode": "series"})
            init = ws.receive_json()
            assert init["type"] == "init"
            assert init["status"] == "capturing"

            ws.send_json({"type": "manual", "code": "123"})
            message = ws.receive_json()
            assert message["type"] == "scan"
            assert message["outcome"] == "accepted"
            assert message["entry"]["code"] == "123"

            ws.send_json({"type": "manual", "code": "123"})
            assert ws.receive_json()["outcome"] == "debounced"

            ws.send_json({"type": "stop"})

        assert client.get("/api/v1/session").json()["status"] == "idle"
        assert client.get("/api/v1/ledger").json()["total"] == 1

    def test_disconnect_stops_session(self, client: TestClient):
        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({"type": "init", "mode": "single"})
            ws.receive_json()

        assert client.get("/api/v1/session").json()["status"] == "idle"

    def test_init_rejected_while_capturing(self, client: TestClient):
        client.post("/api/v1/session/start", json={"mode": "single"})

        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({"type": "init", "mode": "series"})
            message = ws.receive_json()
            assert message["type"] == "error"
            assert message["code"] == "SESSION_ALREADY_ACTIVE"

        assert client.get("/api/v1/session").json()["mode"] == "single"

    def test_disconnect_leaves_newer_session_running(self, client: TestClient):
        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({"type": "init", "mode": "single"})
            ws.receive_json()

            assert client.post("/api/v1/session/stop").status_code == 200
            response = client.post("/api/v1/session/start", json={"mode": "series"})
            assert response.status_code == 200

        state = client.get("/api/v1/session").json()
        assert state["status"] == "capturing"
        assert state["mode"] == "series"
