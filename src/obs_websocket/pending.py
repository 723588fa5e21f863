"""Pending-request table.

Tracks requests that have been sent and are waiting for their response.
Each entry owns a future that is resolved exactly once: with the response,
or with a RequestCancelledError when the connection is torn down.

All operations run on the client's event loop and complete without
awaiting, so no two operations ever interleave on the same entry.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field

from .errors import RequestCancelledError
from .protocol.messages import Response

logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    """A request waiting for its response."""

    message_id: str
    future: asyncio.Future[Response]
    request_type: str | None = None
    created_at: float = field(default_factory=time.monotonic)


class PendingRequestTable:
    """Maps outstanding message IDs to the futures their callers await.

    Once cancel_all() has run the table is closed: later registrations
    fail immediately instead of waiting on a connection that is gone.
    """

    def __init__(self) -> None:
        self._pending: dict[str, PendingRequest] = {}
        self._closed = False
        self._close_reason: str | None = None

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def register(self, message_id: str, request_type: str | None = None) -> asyncio.Future[Response]:
        """Register a request and return the future its response will resolve.

        Raises:
            ValueError: If the message ID is already outstanding.
            RequestCancelledError: If the table has been closed.
        """
        if self._closed:
            raise RequestCancelledError(self._close_reason or "Connection closed")
        if message_id in self._pending:
            raise ValueError(f"Message ID already pending: {message_id}")

        future: asyncio.Future[Response] = asyncio.get_running_loop().create_future()
        self._pending[message_id] = PendingRequest(
            message_id=message_id,
            future=future,
            request_type=request_type,
        )
        return future

    def resolve(self, message_id: str, response: Response) -> bool:
        """Resolve a pending request with its response.

        Returns:
            True if a waiting request was resolved, False if the ID is unknown
            (already cancelled, timed out, or never sent by this client).
        """
        pending = self._pending.pop(message_id, None)
        if pending is None:
            logger.debug(f"No pending request for message {message_id}")
            return False

        if pending.future.done():
            # Caller gave up (task cancelled) after the entry was created
            logger.debug(f"Request {message_id} already completed")
            return False

        pending.future.set_result(response)
        elapsed = time.monotonic() - pending.created_at
        logger.debug(f"Resolved {pending.request_type or 'request'} {message_id} in {elapsed:.3f}s")
        return True

    def discard(self, message_id: str) -> PendingRequest | None:
        """Remove an entry without resolving it (timeout or send failure)."""
        return self._pending.pop(message_id, None)

    def cancel_all(self, reason: str = "Connection closed") -> int:
        """Fail every pending request with RequestCancelledError and close the table.

        Returns:
            Number of requests cancelled
        """
        self._closed = True
        self._close_reason = reason

        pending, self._pending = self._pending, {}
        count = 0
        for entry in pending.values():
            if not entry.future.done():
                entry.future.set_exception(RequestCancelledError(reason))
                count += 1

        if count:
            logger.info(f"Cancelled {count} pending request(s): {reason}")
        return count
