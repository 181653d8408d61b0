"""
Tests for SessionTerminator.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.auth.credentials import CredentialStore
from core.auth.terminator import SessionTerminator


@pytest.fixture
def store():
    return CredentialStore("tok-1")


@pytest.fixture
def terminator(store):
    return SessionTerminator(store)


class TestTerminate:

    @pytest.mark.asyncio
    async def test_clears_credentials_and_notifies(self, terminator, store):
        listener = MagicMock()
        terminator.add_listener(listener)

        performed = await terminator.terminate("refresh_rejected")

        assert performed is True
        assert store.get() is None
        assert terminator.terminated
        assert terminator.reason == "refresh_rejected"
        listener.assert_called_once_with("refresh_rejected")

    @pytest.mark.asyncio
    async def test_async_listener_is_awaited(self, terminator):
        listener = AsyncMock()
        terminator.add_listener(listener)

        await terminator.terminate("timeout")

        listener.assert_awaited_once_with("timeout")

    @pytest.mark.asyncio
    async def test_repeated_calls_collapse(self, terminator):
        listener = MagicMock()
        terminator.add_listener(listener)

        first = await terminator.terminate("a")
        second = await terminator.terminate("b")

        assert first is True
        assert second is False
        assert terminator.reason == "a"
        listener.assert_called_once_with("a")

    @pytest.mark.asyncio
    async def test_concurrent_calls_notify_exactly_once(self, terminator):
        calls = []

        async def slow_listener(reason):
            await asyncio.sleep(0.01)
            calls.append(reason)

        terminator.add_listener(slow_listener)

        results = await asyncio.gather(*(terminator.terminate("x") for _ in range(5)))

        assert sorted(results) == [False, False, False, False, True]
        assert calls == ["x"]

    @pytest.mark.asyncio
    async def test_joiners_wait_for_listeners(self, terminator):
        done = asyncio.Event()

        async def slow_listener(reason):
            await asyncio.sleep(0.01)
            done.set()

        terminator.add_listener(slow_listener)

        first = asyncio.ensure_future(terminator.terminate("x"))
        await asyncio.sleep(0)
        await terminator.terminate("y")

        assert done.is_set()
        await first

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_others(self, terminator, store):
        failing = MagicMock(side_effect=RuntimeError("ui gone"))
        healthy = MagicMock()
        terminator.add_listener(failing)
        terminator.add_listener(healthy)

        await terminator.terminate("refresh_rejected")

        assert store.get() is None
        healthy.assert_called_once_with("refresh_rejected")

    @pytest.mark.asyncio
    async def test_rearm_allows_next_termination(self, terminator, store):
        listener = MagicMock()
        terminator.add_listener(listener)

        await terminator.terminate("first")
        terminator.rearm()
        store.set("tok-2")
        performed = await terminator.terminate("second")

        assert performed is True
        assert store.get() is None
        assert listener.call_count == 2

    @pytest.mark.asyncio
    async def test_removed_listener_not_called(self, terminator):
        listener = MagicMock()
        terminator.add_listener(listener)
        terminator.remove_listener(listener)
        terminator.remove_listener(listener)

        await terminator.terminate("x")

        listener.assert_not_called()

    def test_add_listener_is_idempotent(self, terminator):
        listener = MagicMock()
        terminator.add_listener(listener)
        terminator.add_listener(listener)

        assert terminator._listeners == [listener]
