"""Exception types raised by the obs-websocket client.

Per-request errors (RemoteError, RequestCancelledError) are raised only to
the caller that issued the request; other in-flight requests are unaffected.
"""

from __future__ import annotations


class ObsWebSocketError(Exception):
    """Base class for all client errors."""

    pass


class TransportError(ObsWebSocketError):
    """Socket-level failure: connect, send, or use while disconnected."""

    pass


class RemoteError(ObsWebSocketError):
    """The server answered a request with an error status."""

    def __init__(self, error: str, request_type: str | None = None) -> None:
        super().__init__(error)
        self.error = error
        self.request_type = request_type


class RequestCancelledError(ObsWebSocketError):
    """Request was still outstanding when the connection was torn down."""

    pass


class RequestTimeoutError(RequestCancelledError):
    """Request did not receive a response within its timeout."""

    pass


class AuthenticationFailedError(ObsWebSocketError):
    """The server rejected the authentication handshake."""

    pass


class MalformedMessageError(ObsWebSocketError):
    """An inbound message could not be decoded or classified."""

    pass
