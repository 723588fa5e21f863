"""Unit tests for the pending-request table."""

from __future__ import annotations

import asyncio

import pytest

from obs_websocket.errors import RequestCancelledError
from obs_websocket.pending import PendingRequestTable
from obs_websocket.protocol import Response


def _response(message_id: str, **fields) -> Response:
    return Response(message_id=message_id, fields=fields)


class TestRegister:
    """Tests for registering requests."""

    @pytest.mark.asyncio
    async def test_register_returns_unresolved_future(self) -> None:
        table = PendingRequestTable()
        future = table.register("m1", "GetVersion")

        assert not future.done()
        assert "m1" in table
        assert len(table) == 1

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self) -> None:
        table = PendingRequestTable()
        table.register("m1")

        with pytest.raises(ValueError):
            table.register("m1")

    @pytest.mark.asyncio
    async def test_register_after_close_fails(self) -> None:
        table = PendingRequestTable()
        table.cancel_all("gone")

        with pytest.raises(RequestCancelledError, match="gone"):
            table.register("m1")
        assert len(table) == 0


class TestResolve:
    """Tests for resolving requests."""

    @pytest.mark.asyncio
    async def test_resolve_delivers_response(self) -> None:
        table = PendingRequestTable()
        future = table.register("m1")

        assert table.resolve("m1", _response("m1", name="Live")) is True
        assert (await future).fields == {"name": "Live"}
        assert "m1" not in table

    @pytest.mark.asyncio
    async def test_resolve_unknown_id(self) -> None:
        table = PendingRequestTable()
        table.register("m1")

        assert table.resolve("other", _response("other")) is False
        assert len(table) == 1

    @pytest.mark.asyncio
    async def test_resolve_only_once(self) -> None:
        table = PendingRequestTable()
        future = table.register("m1")

        assert table.resolve("m1", _response("m1", n=1)) is True
        assert table.resolve("m1", _response("m1", n=2)) is False
        assert (await future).fields == {"n": 1}

    @pytest.mark.asyncio
    async def test_resolve_after_caller_gave_up(self) -> None:
        table = PendingRequestTable()
        future = table.register("m1")
        future.cancel()

        assert table.resolve("m1", _response("m1")) is False
        assert len(table) == 0

    @pytest.mark.asyncio
    async def test_discard(self) -> None:
        table = PendingRequestTable()
        table.register("m1", "GetStats")

        entry = table.discard("m1")
        assert entry is not None
        assert entry.request_type == "GetStats"
        assert table.discard("m1") is None
        assert table.resolve("m1", _response("m1")) is False


class TestCancelAll:
    """Tests for teardown cancellation."""

    @pytest.mark.asyncio
    async def test_cancel_all_fails_every_entry(self) -> None:
        table = PendingRequestTable()
        futures = [table.register(f"m{i}") for i in range(3)]

        assert table.cancel_all("Connection lost") == 3
        assert len(table) == 0
        assert table.closed

        for future in futures:
            with pytest.raises(RequestCancelledError, match="Connection lost"):
                await future

    @pytest.mark.asyncio
    async def test_cancel_all_skips_completed(self) -> None:
        table = PendingRequestTable()
        table.register("m1").cancel()
        table.register("m2")

        assert table.cancel_all() == 1

    @pytest.mark.asyncio
    async def test_cancel_all_empty(self) -> None:
        table = PendingRequestTable()
        assert table.cancel_all() == 0
        assert table.closed

    @pytest.mark.asyncio
    async def test_waiters_see_cancellation(self) -> None:
        table = PendingRequestTable()
        future = table.register("m1")
        waiter = asyncio.create_task(asyncio.wait_for(future, 1.0))
        await asyncio.sleep(0)

        table.cancel_all("bye")

        with pytest.raises(RequestCancelledError):
            await waiter
