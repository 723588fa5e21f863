"""Event router - decodes updates and fans them out to subscribers.

Runs on the connection's reader task. Subscribers are invoked one after
another in registration order; async subscribers are awaited before the
next one runs, so delivery order always matches the server's emission
order. A subscriber must not await a request itself (its response could
only be read after the subscriber returns); schedule it with
asyncio.create_task instead.
"""

from __future__ import annotations

import inspect
import logging

from pydantic import BaseModel, ValidationError

from .protocol.messages import Update
from .protocol.updates import EventKind, decode_update
from .subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


class EventRouter:
    """Routes decoded updates to the callbacks in a SubscriptionRegistry."""

    def __init__(self, registry: SubscriptionRegistry) -> None:
        self.registry = registry

    async def dispatch(self, update: Update) -> bool:
        """Decode an update and notify its subscribers.

        Returns:
            True if the update was recognised and delivered, False if it was
            dropped (unknown update-type or undecodable payload).
        """
        try:
            decoded = decode_update(update)
        except ValidationError as e:
            logger.warning(f"Dropping malformed {update.update_type} update: {e}")
            return False

        if decoded is None:
            logger.debug(f"Ignoring unknown update type: {update.update_type}")
            return False

        kind, payload = decoded
        await self.emit(kind, payload)
        return True

    async def emit(self, kind: EventKind, payload: BaseModel) -> int:
        """Invoke every subscriber of kind with payload.

        Returns:
            Number of subscribers that completed without raising
        """
        delivered = 0
        for callback in self.registry.subscribers(kind):
            try:
                result = callback(payload)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:
                logger.exception(f"Error in subscriber for {kind.value}")
        return delivered
