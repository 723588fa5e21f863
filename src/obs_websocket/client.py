"""obs-websocket client.

Owns the connection lifecycle and correlates requests with responses:

- connect(): open the transport, start the reader, authenticate
- call(): send a request and wait for the response with the same message-id
- reader task: consume inbound messages in order; resolve pending requests
  (responses) or fan out to subscribers (updates)
- disconnect(): fail every pending request, stop the reader, close the socket

Usage:
    async with ObsWebSocketClient(ClientConfig(password="secret")) as client:
        client.on(EventKind.SCENE_SWITCHED, lambda e: print(e.scene_name))
        scene = await client.scenes.get_current()
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from enum import Enum
from functools import partial
from typing import Any

from .api import (
    GeneralAPI,
    OutputsAPI,
    ProfilesAPI,
    ScenesAPI,
    SourcesAPI,
    StudioModeAPI,
    TransitionsAPI,
)
from .auth import authenticate
from .config import ClientConfig
from .errors import (
    MalformedMessageError,
    RemoteError,
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
)
from .pending import PendingRequestTable
from .protocol.messages import Response, parse_message
from .protocol.requests import Request, RequestType, new_message_id
from .protocol.updates import Connected, Disconnected, EventKind
from .router import EventRouter
from .subscriptions import EventCallback, SubscriptionRegistry
from .transport import ClientTransport, WebSocketTransport

logger = logging.getLogger(__name__)

# Sentinel: use the configured request timeout
DEFAULT_TIMEOUT: Any = object()


class ConnectionState(str, Enum):
    """Connection state machine."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"


class ObsWebSocketClient:
    """Client for the obs-websocket protocol.

    Any number of tasks may await call() concurrently; each waits only for
    its own response. A single reader task per connection processes inbound
    messages strictly in arrival order.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: ClientTransport | None = None,
        message_id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._transport = transport or WebSocketTransport(self.config)
        self._new_message_id = message_id_factory or partial(
            new_message_id, self.config.message_id_length
        )

        self._state = ConnectionState.DISCONNECTED
        self._url: str | None = None
        self._pending = PendingRequestTable()
        self._reader_task: asyncio.Task[None] | None = None
        self._connect_lock = asyncio.Lock()
        self._closed = asyncio.Event()
        self._closed.set()

        self.subscriptions = SubscriptionRegistry()
        self._router = EventRouter(self.subscriptions)

        # Typed API groups
        self.general = GeneralAPI(self)
        self.scenes = ScenesAPI(self)
        self.sources = SourcesAPI(self)
        self.outputs = OutputsAPI(self)
        self.transitions = TransitionsAPI(self)
        self.profiles = ProfilesAPI(self)
        self.studio = StudioModeAPI(self)

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state != ConnectionState.DISCONNECTED

    @property
    def is_authenticated(self) -> bool:
        return self._state == ConnectionState.AUTHENTICATED

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def pending_count(self) -> int:
        """Number of requests waiting for a response."""
        return len(self._pending)

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def connect(self, url: str | None = None, password: str | None = None) -> None:
        """Connect to the server and authenticate if it requires it.

        Reconnects if already connected. Emits EventKind.CONNECTED once the
        handshake completes.

        Args:
            url: Server URL (defaults to config.url)
            password: Server password (defaults to config.password)

        Raises:
            TransportError: If the socket cannot be opened or drops during
                the handshake
            AuthenticationFailedError: If the server rejects the password
            RequestTimeoutError: If the server does not answer the handshake
                within the request timeout
        """
        url = url or self.config.url
        password = password if password is not None else self.config.password

        async with self._connect_lock:
            if self._state != ConnectionState.DISCONNECTED:
                await self._teardown("Reconnecting")

            # A server-side close may still be tearing down the previous connection
            await self._closed.wait()

            await self._transport.open(url)

            self._url = url
            self._pending = PendingRequestTable()
            self._state = ConnectionState.CONNECTED
            self._closed.clear()
            self._reader_task = asyncio.create_task(self._read_loop())
            logger.info(f"Connected to {url}")

            try:
                auth_required = await authenticate(self.call, password)
            except RequestTimeoutError as e:
                await self._teardown(f"Handshake timed out: {e}")
                raise RequestTimeoutError(f"Handshake timed out: {e}") from e
            except RequestCancelledError as e:
                await self._teardown(f"Handshake interrupted: {e}")
                raise TransportError(f"Connection closed during handshake: {e}") from e
            except Exception as e:
                await self._teardown(f"Handshake failed: {e}")
                raise

            # The reader may have torn down right after the last handshake response
            if self._state != ConnectionState.CONNECTED:
                raise TransportError("Connection closed during handshake")

            self._state = ConnectionState.AUTHENTICATED

        await self._router.emit(
            EventKind.CONNECTED, Connected(url=url, auth_required=auth_required)
        )

    async def disconnect(self) -> None:
        """Close the connection, failing every pending request.

        Safe to call when already disconnected.
        """
        await self._teardown("Disconnected by client")

    async def wait_closed(self) -> None:
        """Wait until the connection is torn down (by either side)."""
        await self._closed.wait()

    async def _teardown(self, reason: str) -> bool:
        """Shared teardown for explicit disconnects and server-side closes."""
        if self._state == ConnectionState.DISCONNECTED:
            return False

        # No await before cancel_all: nothing can register in between
        self._state = ConnectionState.DISCONNECTED
        self._pending.cancel_all(reason)

        try:
            reader, self._reader_task = self._reader_task, None
            if reader is not None and reader is not asyncio.current_task():
                reader.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await reader

            await self._transport.close()
        finally:
            logger.info(f"Disconnected: {reason}")
            try:
                await self._router.emit(EventKind.DISCONNECTED, Disconnected(reason=reason))
            finally:
                # connect() waits on this, so a new connection never overlaps teardown
                self._closed.set()

        return True

    # =========================================================================
    # Requests
    # =========================================================================

    async def call(
        self,
        request_type: str | RequestType,
        fields: dict[str, Any] | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> dict[str, Any]:
        """Send a request and wait for its response.

        Args:
            request_type: Request type (e.g. "GetCurrentScene")
            fields: Request-specific fields; cannot override the
                request-type or message-id keys
            timeout: Seconds to wait (defaults to config.timeout, None waits
                until the response or disconnect)

        Returns:
            The response fields (everything except message-id/status/error)

        Raises:
            TransportError: If not connected or the send fails
            RemoteError: If the server answered with an error status
            RequestCancelledError: If the connection closed first
            RequestTimeoutError: If no response arrived within the timeout
        """
        if self._state == ConnectionState.DISCONNECTED or not self._transport.is_open:
            raise TransportError("Not connected")

        if timeout is DEFAULT_TIMEOUT:
            timeout = self.config.timeout

        pending = self._pending
        request = Request.create(request_type, fields, message_id=self._next_message_id(pending))
        future = pending.register(request.message_id, request.request_type)

        try:
            await self._transport.send(request.to_json())
        except BaseException:
            pending.discard(request.message_id)
            if future.done():
                # Teardown failed the request while the send was suspended
                future.exception()
            else:
                future.cancel()
            raise

        try:
            response = await asyncio.wait_for(future, timeout)
        except TimeoutError:
            pending.discard(request.message_id)
            raise RequestTimeoutError(
                f"{request.request_type} timed out after {timeout}s"
            ) from None
        except asyncio.CancelledError:
            pending.discard(request.message_id)
            raise

        if response.is_error:
            raise RemoteError(response.error or "Unknown error", request.request_type)
        return response.fields

    def _next_message_id(self, pending: PendingRequestTable) -> str:
        """Generate a message ID not currently outstanding."""
        while True:
            candidate = self._new_message_id()
            if candidate not in pending:
                return candidate
            logger.debug(f"Message ID collision on {candidate}, regenerating")

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def on(self, kind: EventKind | str, callback: EventCallback) -> Callable[[], None]:
        """Subscribe to an event kind.

        Callbacks run on the reader task, in registration order, and receive
        the decoded payload model. They may be sync or async.

        Returns:
            Unsubscribe function
        """
        return self.subscriptions.subscribe(kind, callback)

    def off(self, kind: EventKind | str, callback: EventCallback) -> bool:
        """Remove a subscription added with on()."""
        return self.subscriptions.unsubscribe(kind, callback)

    # =========================================================================
    # Inbound messages
    # =========================================================================

    async def _read_loop(self) -> None:
        """Background task reading messages and routing them."""
        reason = "Connection closed by server"
        try:
            async for raw in self._transport.messages():
                await self._handle_message(raw)
        except Exception as e:
            logger.error(f"Read loop error: {e}")
            reason = f"Transport error: {e}"
        else:
            reason = getattr(self._transport, "close_reason", None) or reason

        await self._teardown(reason)

    async def _handle_message(self, raw: str | bytes) -> None:
        """Classify one inbound message and route it."""
        try:
            message = parse_message(raw)
        except MalformedMessageError as e:
            logger.warning(f"Dropping malformed message: {e}")
            return

        if isinstance(message, Response):
            # Unknown IDs (late, duplicate, or cancelled) are dropped
            self._pending.resolve(message.message_id, message)
            return

        await self._router.dispatch(message)

    async def __aenter__(self) -> ObsWebSocketClient:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()
