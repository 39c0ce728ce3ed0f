from __future__ import annotations

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from src.server import app


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("RELAY_ADMIN_TOKENS", "secret")
    monkeypatch.setenv("MAX_CONCURRENT_CONNECTIONS", "2")
    with TestClient(app) as test_client:
        yield test_client


def test_health_endpoints(client: TestClient) -> None:
    for path in ("/", "/health", "/healthz"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


def test_capture_is_answered_end_to_end(client: TestClient) -> None:
    with client.websocket_connect("/ws?token=secret") as admin:
        admin.send_json({"role": "admin", "adminId": "ops"})
        assert admin.receive_json() == {"type": "ready", "role": "admin", "connectionId": "conn-1"}

        with client.websocket_connect("/ws") as capture_client:
            capture_client.send_json({"role": "client", "clientSessionId": "s1"})
            ready = capture_client.receive_json()
            assert ready["type"] == "ready"
            assert ready["clientSessionId"] == "s1"

            capture_client.send_text("definitely not json")
            capture_client.send_json({"type": "capture", "clientSessionId": "s1", "payload": "data:image/png;base64,AA"})
            ack = capture_client.receive_json()
            assert ack["type"] == "captured"

            forwarded = admin.receive_json()
            assert forwarded["type"] == "capture"
            assert forwarded["requestId"] == ack["requestId"]
            assert forwarded["payload"] == "data:image/png;base64,AA"

            admin.send_json({"type": "answer", "requestId": ack["requestId"], "body": "42"})
            assert capture_client.receive_json() == {"type": "answer", "requestId": ack["requestId"], "body": "42"}
            answered = admin.receive_json()
            assert answered["type"] == "answered"
            assert answered["by"] == "ops"

            admin.send_json({"type": "answer", "requestId": ack["requestId"], "body": "again"})
            error = admin.receive_json()
            assert error["type"] == "error"
            assert error["reason"] == "unknown_request_id"


def test_admin_without_valid_token_is_rejected(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"role": "admin", "token": "wrong"})
        error = ws.receive_json()
        assert error["reason"] == "unauthorized"
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()
        assert exc.value.code == 4001


def test_unidentified_capture_is_refused(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "capture", "clientSessionId": "s1", "payload": "x"})
        assert ws.receive_json()["reason"] == "not_identified"
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}


def test_connections_beyond_capacity_are_turned_away(client: TestClient) -> None:
    with client.websocket_connect("/ws"), client.websocket_connect("/ws"):
        with client.websocket_connect("/ws") as third:
            error = third.receive_json()
            assert error["reason"] == "server_at_capacity"
            with pytest.raises(WebSocketDisconnect) as exc:
                third.receive_json()
            assert exc.value.code == 4002
