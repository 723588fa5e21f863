"""obs-websocket client - Control OBS Studio over its WebSocket protocol.

Provides two transport modes:
- websocket: Connect to a running obs-websocket server
- mock: For testing without real I/O

Requests are correlated with their responses by message-id, so any number
of tasks can await client.call() concurrently. Server updates are decoded
into typed payloads and delivered to subscribers registered with
client.on().
"""

from .client import ConnectionState, ObsWebSocketClient
from .config import ClientConfig
from .errors import (
    AuthenticationFailedError,
    MalformedMessageError,
    ObsWebSocketError,
    RemoteError,
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
)
from .protocol import EventKind, OutputState, RequestType
from .protocol.updates import (
    Connected,
    Disconnected,
    Heartbeat,
    OutputStateChanged,
    SceneSwitched,
    UpdatePayload,
)
from .transport import (
    ClientTransport,
    MockTransport,
    WebSocketTransport,
    create_mock_transport,
    create_websocket_transport,
)

__all__ = [
    # Client
    "ObsWebSocketClient",
    "ConnectionState",
    "ClientConfig",
    # Errors
    "ObsWebSocketError",
    "TransportError",
    "RemoteError",
    "RequestCancelledError",
    "RequestTimeoutError",
    "AuthenticationFailedError",
    "MalformedMessageError",
    # Events
    "EventKind",
    "OutputState",
    "RequestType",
    "Connected",
    "Disconnected",
    "Heartbeat",
    "OutputStateChanged",
    "SceneSwitched",
    "UpdatePayload",
    # Transports
    "ClientTransport",
    "WebSocketTransport",
    "MockTransport",
    "create_websocket_transport",
    "create_mock_transport",
]
