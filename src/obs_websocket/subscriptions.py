"""Subscription registry for event callbacks.

Subscriber lists are copy-on-write tuples: subscribe/unsubscribe swap in a
new tuple under a lock, while fan-out reads the current tuple without
locking. A callback added while an event is being delivered does not
receive that event.
"""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable
from typing import Any

from .protocol.updates import EventKind

# Sync or async; async results are awaited by the router
EventCallback = Callable[[Any], Awaitable[None] | None]


class SubscriptionRegistry:
    """Per-client table from event kind to registered callbacks."""

    def __init__(self) -> None:
        self._subscriptions: dict[EventKind, tuple[EventCallback, ...]] = {}
        self._lock = threading.Lock()

    def subscribe(self, kind: EventKind | str, callback: EventCallback) -> Callable[[], None]:
        """Register a callback for an event kind.

        The same callback may be registered more than once; it is then
        invoked once per registration.

        Returns:
            Unsubscribe function
        """
        kind = EventKind(kind)
        with self._lock:
            self._subscriptions[kind] = (*self._subscriptions.get(kind, ()), callback)

        def unsubscribe() -> None:
            self.unsubscribe(kind, callback)

        return unsubscribe

    def unsubscribe(self, kind: EventKind | str, callback: EventCallback) -> bool:
        """Remove the most recent registration of callback for kind."""
        kind = EventKind(kind)
        with self._lock:
            current = self._subscriptions.get(kind, ())
            for index in range(len(current) - 1, -1, -1):
                if current[index] == callback:
                    remaining = current[:index] + current[index + 1 :]
                    if remaining:
                        self._subscriptions[kind] = remaining
                    else:
                        del self._subscriptions[kind]
                    return True
        return False

    def subscribers(self, kind: EventKind) -> tuple[EventCallback, ...]:
        """Snapshot of the callbacks for kind, in registration order."""
        return self._subscriptions.get(kind, ())

    def count(self, kind: EventKind | None = None) -> int:
        if kind is not None:
            return len(self._subscriptions.get(kind, ()))
        return sum(len(callbacks) for callbacks in self._subscriptions.values())

    def clear(self) -> None:
        with self._lock:
            self._subscriptions = {}
