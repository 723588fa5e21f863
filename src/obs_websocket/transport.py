"""Client-side transport abstraction.

Lets the client run over a real WebSocket or an in-memory mock without
changing client code.

Architecture:
- ClientTransport is the PROTOCOL (interface) for all transports
- Transports move whole text documents; they know nothing about
  message IDs, responses or updates
- ObsWebSocketClient accepts any ClientTransport via constructor injection
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any, Protocol, runtime_checkable

import websockets
from websockets.exceptions import ConnectionClosed

from .auth import compute_auth_response
from .config import ClientConfig
from .errors import TransportError
from .protocol.requests import MESSAGE_ID_KEY, REQUEST_TYPE_KEY, RequestType

logger = logging.getLogger(__name__)


@runtime_checkable
class ClientTransport(Protocol):
    """Protocol for client transports.

    All transports must implement:
    - open/close: Lifecycle management
    - send: Write one whole document
    - messages: Yield inbound documents in arrival order until the
      connection closes (from either side)
    """

    @property
    def is_open(self) -> bool:
        """Check if the transport is open."""
        ...

    async def open(self, url: str) -> None:
        """Open the connection.

        Raises:
            TransportError: If the connection cannot be established
        """
        ...

    async def close(self) -> None:
        """Close the connection. Safe to call when already closed."""
        ...

    async def send(self, text: str) -> None:
        """Send one document.

        Raises:
            TransportError: If not open or the write fails
        """
        ...

    def messages(self) -> AsyncIterator[str | bytes]:
        """Yield inbound documents until the connection closes."""
        ...


class WebSocketTransport:
    """Transport over a single WebSocket connection (websockets library).

    Wire format:
    - One JSON document per text frame, both directions
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        self.config = config or ClientConfig()
        self._ws: Any = None  # websockets ClientConnection
        self.close_reason: str | None = None

    @property
    def is_open(self) -> bool:
        return self._ws is not None

    async def open(self, url: str) -> None:
        """Connect to the WebSocket server."""
        if self._ws is not None:
            raise TransportError("WebSocket already open")

        try:
            self._ws = await websockets.connect(
                url,
                open_timeout=self.config.open_timeout,
                ping_interval=self.config.ping_interval,
                ping_timeout=self.config.ping_timeout,
                max_size=None,
            )
        except Exception as e:
            raise TransportError(f"Failed to connect to {url}: {e}") from e

        self.close_reason = None
        logger.info(f"WebSocket connected to {url}")

    async def close(self) -> None:
        """Close WebSocket connection."""
        ws, self._ws = self._ws, None
        if ws is not None:
            await ws.close()
            logger.info("WebSocket closed")

    async def send(self, text: str) -> None:
        if self._ws is None:
            raise TransportError("WebSocket not connected")

        try:
            await self._ws.send(text)
        except ConnectionClosed as e:
            raise TransportError(f"WebSocket closed: {e}") from e

    async def messages(self) -> AsyncIterator[str | bytes]:
        """Receive messages from the WebSocket."""
        if self._ws is None:
            raise TransportError("WebSocket not connected")

        try:
            async for data in self._ws:
                yield data
            self.close_reason = "Connection closed by server"
        except ConnectionClosed as e:
            self.close_reason = f"Connection lost: {e}"
            logger.warning(f"WebSocket receive ended: {e}")


# Canned response: fixed fields, or a function of the request document
ResponseSpec = dict[str, Any] | Callable[[dict[str, Any]], dict[str, Any]]


class MockTransport:
    """Mock transport for testing.

    Records requests and lets tests inject responses and updates.
    No actual I/O - everything is in-memory.

    Usage:
        transport = MockTransport()
        transport.set_response("GetAuthRequired", {"authRequired": False})
        transport.set_response("GetCurrentScene", {"name": "Live", "sources": []})

        client = ObsWebSocketClient(transport=transport)
        await client.connect()
        scene = await client.scenes.get_current()

        assert transport.sent[-1]["request-type"] == "GetCurrentScene"

    Requests without a canned response stay pending until the test answers
    them with respond().
    """

    def __init__(self, *, fail_open: bool = False) -> None:
        self.fail_open = fail_open
        self.fail_send = False
        self.url: str | None = None
        self._open = False
        self._responses: dict[str, ResponseSpec] = {}
        self._sent: list[dict[str, Any]] = []
        self._inbound: asyncio.Queue[str | bytes | None] = asyncio.Queue()
        self._outbound: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def sent(self) -> list[dict[str, Any]]:
        """All request documents sent through this transport."""
        return self._sent.copy()

    def requests(self, request_type: str | RequestType) -> list[dict[str, Any]]:
        """Sent requests of one type."""
        name = request_type.value if isinstance(request_type, RequestType) else request_type
        return [doc for doc in self._sent if doc.get(REQUEST_TYPE_KEY) == name]

    def clear_sent(self) -> None:
        """Forget recorded requests (e.g. the handshake after connect)."""
        self._sent.clear()
        self._outbound = asyncio.Queue()

    def set_response(
        self,
        request_type: str | RequestType,
        fields: ResponseSpec | None = None,
        *,
        error: str | None = None,
    ) -> None:
        """Answer every future request of this type automatically.

        Args:
            request_type: Request type to answer
            fields: Result fields, or a function building them from the request
            error: If set, answer with status "error" and this text instead
        """
        name = request_type.value if isinstance(request_type, RequestType) else request_type
        if error is not None:
            self._responses[name] = {"status": "error", "error": error}
        else:
            self._responses[name] = fields if fields is not None else {}

    def respond(
        self,
        message_id: str,
        fields: dict[str, Any] | None = None,
        *,
        error: str | None = None,
    ) -> None:
        """Queue a response for a specific message ID."""
        body: dict[str, Any] = {MESSAGE_ID_KEY: message_id, "status": "ok"}
        if error is not None:
            body.update({"status": "error", "error": error})
        elif fields:
            body.update(fields)
        self.inject(body)

    def inject(self, message: dict[str, Any] | str | bytes) -> None:
        """Queue a raw inbound message (dicts are JSON-encoded)."""
        if isinstance(message, dict):
            message = json.dumps(message)
        self._inbound.put_nowait(message)

    def drop(self) -> None:
        """Simulate the server closing the connection."""
        self._open = False
        self._inbound.put_nowait(None)

    async def next_request(self, timeout: float = 1.0) -> dict[str, Any]:
        """Wait for the next request sent through this transport."""
        return await asyncio.wait_for(self._outbound.get(), timeout=timeout)

    async def open(self, url: str) -> None:
        if self.fail_open:
            raise TransportError(f"Failed to connect to {url}: mock refused")
        self.url = url
        self._open = True
        self._inbound = asyncio.Queue()

    async def close(self) -> None:
        if self._open:
            self._open = False
            self._inbound.put_nowait(None)

    async def send(self, text: str) -> None:
        if not self._open:
            raise TransportError("Mock transport not open")
        if self.fail_send:
            raise TransportError("Mock send failure")

        document = json.loads(text)
        self._sent.append(document)
        self._outbound.put_nowait(document)

        spec = self._responses.get(document.get(REQUEST_TYPE_KEY))
        if spec is None:
            return

        result = spec(document) if callable(spec) else spec
        self.inject({MESSAGE_ID_KEY: document[MESSAGE_ID_KEY], "status": "ok", **result})

    async def messages(self) -> AsyncIterator[str | bytes]:
        """Yield injected messages until closed or dropped."""
        while True:
            message = await self._inbound.get()
            if message is None:
                return
            yield message


# Factory functions

MOCK_CHALLENGE = "mock-challenge"
MOCK_SALT = "mock-salt"


def create_websocket_transport(config: ClientConfig | None = None) -> WebSocketTransport:
    """Create a WebSocket transport."""
    return WebSocketTransport(config)


def create_mock_transport(password: str | None = None) -> MockTransport:
    """Create a mock transport that answers the authentication handshake.

    Args:
        password: If given, the mock requires authentication and accepts
            only this password; otherwise it reports no auth required.
    """
    transport = MockTransport()

    if password is None:
        transport.set_response(RequestType.GET_AUTH_REQUIRED, {"authRequired": False})
        return transport

    expected = compute_auth_response(password, MOCK_SALT, MOCK_CHALLENGE)

    def check_auth(request: dict[str, Any]) -> dict[str, Any]:
        if request.get("auth") == expected:
            return {}
        return {"status": "error", "error": "Authentication Failed."}

    transport.set_response(
        RequestType.GET_AUTH_REQUIRED,
        {"authRequired": True, "challenge": MOCK_CHALLENGE, "salt": MOCK_SALT},
    )
    transport.set_response(RequestType.AUTHENTICATE, check_auth)
    return transport
