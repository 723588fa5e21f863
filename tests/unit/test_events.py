"""Unit tests for the subscription registry and event router."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from obs_websocket.protocol import EventKind, Update
from obs_websocket.protocol.updates import Disconnected, SceneSwitched
from obs_websocket.router import EventRouter
from obs_websocket.subscriptions import SubscriptionRegistry


def _switch_scenes(name: str = "Live") -> Update:
    return Update.from_wire({"update-type": "SwitchScenes", "scene-name": name})


# =============================================================================
# SubscriptionRegistry
# =============================================================================


class TestSubscriptionRegistry:
    """Tests for subscribe/unsubscribe bookkeeping."""

    def test_subscribe_preserves_order(self) -> None:
        registry = SubscriptionRegistry()
        first, second = MagicMock(), MagicMock()

        registry.subscribe(EventKind.SCENE_SWITCHED, first)
        registry.subscribe(EventKind.SCENE_SWITCHED, second)

        assert registry.subscribers(EventKind.SCENE_SWITCHED) == (first, second)
        assert registry.count() == 2

    def test_subscribe_by_string(self) -> None:
        registry = SubscriptionRegistry()
        callback = MagicMock()

        registry.subscribe("scene.switched", callback)

        assert registry.subscribers(EventKind.SCENE_SWITCHED) == (callback,)

    def test_unknown_kind_rejected(self) -> None:
        registry = SubscriptionRegistry()

        with pytest.raises(ValueError):
            registry.subscribe("scene.exploded", MagicMock())

    def test_unsubscribe_function(self) -> None:
        registry = SubscriptionRegistry()
        callback = MagicMock()

        unsubscribe = registry.subscribe(EventKind.HEARTBEAT, callback)
        unsubscribe()

        assert registry.subscribers(EventKind.HEARTBEAT) == ()
        assert registry.count(EventKind.HEARTBEAT) == 0

    def test_duplicate_registration_removed_one_at_a_time(self) -> None:
        registry = SubscriptionRegistry()
        callback, other = MagicMock(), MagicMock()
        registry.subscribe(EventKind.HEARTBEAT, callback)
        registry.subscribe(EventKind.HEARTBEAT, other)
        registry.subscribe(EventKind.HEARTBEAT, callback)

        assert registry.unsubscribe(EventKind.HEARTBEAT, callback) is True
        assert registry.subscribers(EventKind.HEARTBEAT) == (callback, other)

    def test_unsubscribe_unknown_callback(self) -> None:
        registry = SubscriptionRegistry()
        assert registry.unsubscribe(EventKind.HEARTBEAT, MagicMock()) is False

    def test_snapshot_is_unaffected_by_later_changes(self) -> None:
        registry = SubscriptionRegistry()
        first = MagicMock()
        registry.subscribe(EventKind.EXITING, first)

        snapshot = registry.subscribers(EventKind.EXITING)
        registry.subscribe(EventKind.EXITING, MagicMock())
        registry.unsubscribe(EventKind.EXITING, first)

        assert snapshot == (first,)

    def test_clear(self) -> None:
        registry = SubscriptionRegistry()
        registry.subscribe(EventKind.EXITING, MagicMock())
        registry.subscribe(EventKind.HEARTBEAT, MagicMock())

        registry.clear()

        assert registry.count() == 0


# =============================================================================
# EventRouter
# =============================================================================


class TestEventRouter:
    """Tests for decoding and fan-out."""

    @pytest.mark.asyncio
    async def test_dispatch_delivers_payload(self) -> None:
        registry = SubscriptionRegistry()
        router = EventRouter(registry)
        callback = MagicMock()
        registry.subscribe(EventKind.SCENE_SWITCHED, callback)

        assert await router.dispatch(_switch_scenes("Intermission")) is True

        callback.assert_called_once()
        payload = callback.call_args.args[0]
        assert isinstance(payload, SceneSwitched)
        assert payload.scene_name == "Intermission"

    @pytest.mark.asyncio
    async def test_subscribers_called_in_registration_order(self) -> None:
        registry = SubscriptionRegistry()
        router = EventRouter(registry)
        calls: list[str] = []
        registry.subscribe(EventKind.SCENE_SWITCHED, lambda e: calls.append("first"))
        registry.subscribe(EventKind.SCENE_SWITCHED, lambda e: calls.append("second"))

        await router.dispatch(_switch_scenes())

        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_async_subscriber_awaited(self) -> None:
        registry = SubscriptionRegistry()
        router = EventRouter(registry)
        callback = AsyncMock()
        registry.subscribe(EventKind.SCENE_SWITCHED, callback)

        await router.dispatch(_switch_scenes())

        callback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_stop_others(self) -> None:
        registry = SubscriptionRegistry()
        router = EventRouter(registry)
        after = MagicMock()
        registry.subscribe(EventKind.SCENE_SWITCHED, MagicMock(side_effect=RuntimeError("boom")))
        registry.subscribe(EventKind.SCENE_SWITCHED, AsyncMock(side_effect=RuntimeError("boom")))
        registry.subscribe(EventKind.SCENE_SWITCHED, after)

        await router.dispatch(_switch_scenes())

        after.assert_called_once()

    @pytest.mark.asyncio
    async def test_emit_counts_successful_deliveries(self) -> None:
        registry = SubscriptionRegistry()
        router = EventRouter(registry)
        registry.subscribe(EventKind.DISCONNECTED, MagicMock())
        registry.subscribe(EventKind.DISCONNECTED, MagicMock(side_effect=ValueError()))

        delivered = await router.emit(EventKind.DISCONNECTED, Disconnected(reason="bye"))

        assert delivered == 1

    @pytest.mark.asyncio
    async def test_subscriber_added_during_dispatch_misses_current_event(self) -> None:
        registry = SubscriptionRegistry()
        router = EventRouter(registry)
        late = MagicMock()
        registry.subscribe(
            EventKind.SCENE_SWITCHED,
            lambda e: registry.subscribe(EventKind.SCENE_SWITCHED, late),
        )

        await router.dispatch(_switch_scenes())
        late.assert_not_called()

        await router.dispatch(_switch_scenes())
        late.assert_called_once()

    @pytest.mark.asyncio
    async def test_unknown_update_type_ignored(self) -> None:
        registry = SubscriptionRegistry()
        router = EventRouter(registry)
        callbacks = [MagicMock() for _ in EventKind]
        for kind, callback in zip(EventKind, callbacks):
            registry.subscribe(kind, callback)

        assert await router.dispatch(Update.from_wire({"update-type": "BrandNew"})) is False

        for callback in callbacks:
            callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_undecodable_update_dropped(self) -> None:
        registry = SubscriptionRegistry()
        router = EventRouter(registry)
        callback = MagicMock()
        registry.subscribe(EventKind.SCENE_SWITCHED, callback)

        # scene-name is required
        assert await router.dispatch(Update.from_wire({"update-type": "SwitchScenes"})) is False
        callback.assert_not_called()
