"""Tests for the WebSocket echo endpoint."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError
from starlette.websockets import WebSocketDisconnect

from devserver.config.settings import ServerConfig, Settings
from devserver.endpoint.echo import POLICY_VIOLATION, Upgrader, echo_loop
from devserver.endpoint.server import create_app


class TestEchoEndpoint:
    def test_frames_echoed_in_order(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/echo") as ws:
            for frame in ("a", "b", "c"):
                ws.send_text(frame)
            assert [ws.receive_text() for _ in range(3)] == ["a", "b", "c"]

    def test_binary_frames_stay_binary(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/echo") as ws:
            ws.send_bytes(b"\x00\x01\xff")
            assert ws.receive_bytes() == b"\x00\x01\xff"
            ws.send_text("text")
            assert ws.receive_text() == "text"

    def test_close_does_not_affect_other_connections(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/echo") as first:
            with client.websocket_connect("/ws/echo") as second:
                first.send_text("one")
                second.send_text("two")
                assert first.receive_text() == "one"
                assert second.receive_text() == "two"
            first.send_text("still here")
            assert first.receive_text() == "still here"

    def test_reconnect_after_close(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/echo") as ws:
            ws.send_text("x")
            assert ws.receive_text() == "x"
        with client.websocket_connect("/ws/echo") as ws:
            ws.send_text("y")
            assert ws.receive_text() == "y"

    def test_same_origin_accepted(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/echo", headers={"origin": "http://testserver"}) as ws:
            ws.send_text("hi")
            assert ws.receive_text() == "hi"

    def test_cross_origin_rejected(self, client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(
                "/ws/echo", headers={"origin": "http://evil.example"}
            ):
                pass
        assert exc_info.value.code == POLICY_VIOLATION

    def test_cross_origin_allowed_when_check_disabled(self, template_file: Path) -> None:
        settings = Settings(server=ServerConfig(template_path=template_file, check_origin=False))
        client = TestClient(create_app(settings, resolve_ip=lambda: "10.0.0.1"))
        with client.websocket_connect("/ws/echo", headers={"origin": "http://evil.example"}) as ws:
            ws.send_text("ok")
            assert ws.receive_text() == "ok"

    def test_plain_get_is_bad_request(self, client: TestClient) -> None:
        resp = client.get("/ws/echo")
        assert resp.status_code == 400
        assert resp.text == "Bad Request"


class TestUpgrader:
    def _websocket(self, headers: dict[str, str]) -> MagicMock:
        ws = MagicMock()
        ws.headers = headers
        return ws

    def test_no_origin_header(self) -> None:
        assert Upgrader().origin_allowed(self._websocket({"host": "example.com"}))

    def test_origin_host_compared_case_insensitively(self) -> None:
        ws = self._websocket({"host": "Example.com:8080", "origin": "https://example.COM:8080"})
        assert Upgrader().origin_allowed(ws)

    def test_port_mismatch_rejected(self) -> None:
        ws = self._websocket({"host": "example.com:8080", "origin": "http://example.com:9090"})
        assert not Upgrader().origin_allowed(ws)

    def test_upgrader_is_immutable(self) -> None:
        upgrader = Upgrader()
        with pytest.raises(ValidationError):
            upgrader.check_origin = False  # type: ignore[misc]


class TestEchoLoop:
    @pytest.mark.asyncio
    async def test_stops_on_write_error(self) -> None:
        ws = AsyncMock()
        ws.receive.side_effect = [{"type": "websocket.receive", "text": "a"}]
        ws.send_text.side_effect = WebSocketDisconnect(code=1006)
        await echo_loop(ws)
        ws.send_text.assert_awaited_once_with("a")

    @pytest.mark.asyncio
    async def test_stops_on_read_error(self) -> None:
        ws = AsyncMock()
        ws.receive.side_effect = RuntimeError("connection reset")
        await echo_loop(ws)
        ws.send_text.assert_not_awaited()
        ws.send_bytes.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stops_on_disconnect_message(self) -> None:
        ws = AsyncMock()
        ws.receive.side_effect = [
            {"type": "websocket.receive", "bytes": b"z"},
            {"type": "websocket.disconnect", "code": 1000},
        ]
        await echo_loop(ws)
        ws.send_bytes.assert_awaited_once_with(b"z")
        assert ws.receive.await_count == 2
