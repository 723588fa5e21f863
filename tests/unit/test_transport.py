"""Unit tests for client transports.

Tests:
- WebSocketTransport lifecycle over a patched websockets.connect
- MockTransport canned responses and message queue
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, patch

import pytest
from websockets.exceptions import ConnectionClosed

from obs_websocket import ClientConfig, ClientTransport, MockTransport, WebSocketTransport
from obs_websocket.errors import TransportError


class FakeSocket:
    """Minimal stand-in for a websockets client connection."""

    def __init__(self, frames: list[str] | None = None, error: Exception | None = None) -> None:
        self.frames = frames or []
        self.error = error
        self.send = AsyncMock()
        self.close = AsyncMock()

    def __aiter__(self) -> AsyncIterator[str]:
        return self._receive()

    async def _receive(self) -> AsyncIterator[str]:
        for frame in self.frames:
            yield frame
        if self.error is not None:
            raise self.error


# =============================================================================
# WebSocketTransport
# =============================================================================


class TestWebSocketTransport:
    """Tests for the websockets-based transport."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(WebSocketTransport(), ClientTransport)
        assert isinstance(MockTransport(), ClientTransport)

    @pytest.mark.asyncio
    async def test_open_passes_config(self) -> None:
        config = ClientConfig(open_timeout=3.0, ping_interval=None)
        transport = WebSocketTransport(config)
        socket = FakeSocket()

        with patch(
            "obs_websocket.transport.websockets.connect", AsyncMock(return_value=socket)
        ) as connect:
            await transport.open("ws://obs.test:4444")

        assert transport.is_open
        connect.assert_awaited_once()
        assert connect.call_args.args == ("ws://obs.test:4444",)
        assert connect.call_args.kwargs["open_timeout"] == 3.0
        assert connect.call_args.kwargs["ping_interval"] is None

    @pytest.mark.asyncio
    async def test_open_failure(self) -> None:
        transport = WebSocketTransport()

        with patch(
            "obs_websocket.transport.websockets.connect",
            AsyncMock(side_effect=OSError("Connection refused")),
        ):
            with pytest.raises(TransportError, match="Connection refused"):
                await transport.open("ws://obs.test:4444")

        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_open_twice(self) -> None:
        transport = WebSocketTransport()

        with patch(
            "obs_websocket.transport.websockets.connect", AsyncMock(return_value=FakeSocket())
        ):
            await transport.open("ws://obs.test:4444")
            with pytest.raises(TransportError):
                await transport.open("ws://obs.test:4444")

    @pytest.mark.asyncio
    async def test_send(self) -> None:
        transport = WebSocketTransport()
        socket = FakeSocket()

        with patch("obs_websocket.transport.websockets.connect", AsyncMock(return_value=socket)):
            await transport.open("ws://obs.test:4444")
        await transport.send('{"request-type": "GetVersion"}')

        socket.send.assert_awaited_once_with('{"request-type": "GetVersion"}')

    @pytest.mark.asyncio
    async def test_send_not_open(self) -> None:
        with pytest.raises(TransportError):
            await WebSocketTransport().send("{}")

    @pytest.mark.asyncio
    async def test_send_on_closed_socket(self) -> None:
        transport = WebSocketTransport()
        socket = FakeSocket()
        socket.send.side_effect = ConnectionClosed(None, None)

        with patch("obs_websocket.transport.websockets.connect", AsyncMock(return_value=socket)):
            await transport.open("ws://obs.test:4444")

        with pytest.raises(TransportError):
            await transport.send("{}")

    @pytest.mark.asyncio
    async def test_messages_until_server_close(self) -> None:
        transport = WebSocketTransport()
        socket = FakeSocket(frames=["one", "two"])

        with patch("obs_websocket.transport.websockets.connect", AsyncMock(return_value=socket)):
            await transport.open("ws://obs.test:4444")

        received = [frame async for frame in transport.messages()]

        assert received == ["one", "two"]
        assert transport.close_reason == "Connection closed by server"

    @pytest.mark.asyncio
    async def test_messages_end_on_connection_lost(self) -> None:
        transport = WebSocketTransport()
        socket = FakeSocket(frames=["one"], error=ConnectionClosed(None, None))

        with patch("obs_websocket.transport.websockets.connect", AsyncMock(return_value=socket)):
            await transport.open("ws://obs.test:4444")

        received = [frame async for frame in transport.messages()]

        assert received == ["one"]
        assert transport.close_reason is not None
        assert transport.close_reason.startswith("Connection lost")

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        transport = WebSocketTransport()
        socket = FakeSocket()

        with patch("obs_websocket.transport.websockets.connect", AsyncMock(return_value=socket)):
            await transport.open("ws://obs.test:4444")

        await transport.close()
        await transport.close()

        socket.close.assert_awaited_once()
        assert not transport.is_open


# =============================================================================
# MockTransport
# =============================================================================


class TestMockTransport:
    """Tests for the in-memory transport."""

    @pytest.mark.asyncio
    async def test_canned_response(self) -> None:
        transport = MockTransport()
        transport.set_response("GetVersion", {"obs-studio-version": "27.0.0"})
        await transport.open("ws://mock")

        await transport.send(json.dumps({"request-type": "GetVersion", "message-id": "m1"}))
        transport.drop()

        received = [json.loads(m) async for m in transport.messages()]
        assert received == [{"message-id": "m1", "status": "ok", "obs-studio-version": "27.0.0"}]

    @pytest.mark.asyncio
    async def test_error_response(self) -> None:
        transport = MockTransport()
        transport.set_response("StartStreaming", error="streaming already active")
        await transport.open("ws://mock")

        await transport.send(json.dumps({"request-type": "StartStreaming", "message-id": "m1"}))
        transport.drop()

        (response,) = [json.loads(m) async for m in transport.messages()]
        assert response["status"] == "error"
        assert response["error"] == "streaming already active"

    @pytest.mark.asyncio
    async def test_unanswered_request_recorded(self) -> None:
        transport = MockTransport()
        await transport.open("ws://mock")

        await transport.send(json.dumps({"request-type": "Slow", "message-id": "m1"}))

        assert transport.requests("Slow") == [{"request-type": "Slow", "message-id": "m1"}]
        assert (await transport.next_request())["message-id"] == "m1"

    @pytest.mark.asyncio
    async def test_send_when_closed(self) -> None:
        with pytest.raises(TransportError):
            await MockTransport().send("{}")

    @pytest.mark.asyncio
    async def test_open_failure(self) -> None:
        with pytest.raises(TransportError):
            await MockTransport(fail_open=True).open("ws://mock")
