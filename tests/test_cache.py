"""Tests for CredentialCache: coalescing, stale-on-failure, subscriptions."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from gpass.cache import CredentialCache
from gpass.errors import ProtocolError, TransportError
from gpass.models import NewCredential


class TestCredentialCacheRead:
    def test_empty_before_first_load(self, fake_client):
        cache = CredentialCache(fake_client)
        assert cache.read() == ()
        assert cache.is_loading() is False
        assert fake_client.list_calls == 0

    @pytest.mark.asyncio
    async def test_revalidate_populates_snapshot(self, fake_client, logins):
        cache = CredentialCache(fake_client)
        snapshot = await cache.revalidate()
        assert snapshot == tuple(logins)
        assert cache.read() is snapshot
        assert cache.is_loading() is False

    @pytest.mark.asyncio
    async def test_read_does_not_block_while_loading(self, fake_client):
        fake_client.gate = asyncio.Event()
        cache = CredentialCache(fake_client)
        pending = asyncio.create_task(cache.revalidate())
        await asyncio.sleep(0)
        assert cache.is_loading() is True
        assert cache.read() == ()
        fake_client.gate.set()
        await pending
        assert cache.is_loading() is False


class TestCredentialCacheCoalescing:
    @pytest.mark.asyncio
    async def test_concurrent_revalidate_makes_one_list_call(self, fake_client):
        fake_client.gate = asyncio.Event()
        cache = CredentialCache(fake_client)
        first = asyncio.create_task(cache.revalidate())
        second = asyncio.create_task(cache.revalidate())
        await asyncio.sleep(0)
        fake_client.gate.set()
        a, b = await asyncio.gather(first, second)
        assert fake_client.list_calls == 1
        assert a is b
        assert cache.read() is a

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_the_error(self, fake_client):
        fake_client.gate = asyncio.Event()
        fake_client.list_error = TransportError("connection refused")
        cache = CredentialCache(fake_client)
        first = asyncio.create_task(cache.revalidate())
        second = asyncio.create_task(cache.revalidate())
        await asyncio.sleep(0)
        fake_client.gate.set()
        a, b = await asyncio.gather(first, second, return_exceptions=True)
        assert fake_client.list_calls == 1
        assert a is fake_client.list_error
        assert b is fake_client.list_error

    @pytest.mark.asyncio
    async def test_sequential_revalidate_fetches_again(self, fake_client):
        cache = CredentialCache(fake_client)
        await cache.revalidate()
        await cache.revalidate()
        assert fake_client.list_calls == 2

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_fetch(self, fake_client, logins):
        fake_client.gate = asyncio.Event()
        cache = CredentialCache(fake_client)
        first = asyncio.create_task(cache.revalidate())
        second = asyncio.create_task(cache.revalidate())
        await asyncio.sleep(0)
        first.cancel()
        fake_client.gate.set()
        assert await second == tuple(logins)
        assert first.cancelled()
        assert cache.read() == tuple(logins)

    @pytest.mark.asyncio
    async def test_fresh_waits_for_stale_fetch_then_refetches(self, fake_client):
        fake_client.gate = asyncio.Event()
        cache = CredentialCache(fake_client)
        stale = asyncio.create_task(cache.revalidate())
        await asyncio.sleep(0)

        created = await fake_client.create(NewCredential(url="https://new.example", username="n"))
        fresh = asyncio.create_task(cache.revalidate(fresh=True))
        await asyncio.sleep(0)
        fake_client.gate.set()
        await stale
        snapshot = await fresh

        assert fake_client.list_calls == 2
        assert fake_client.max_active == 1
        assert any(c.id == created.id for c in snapshot)

    @pytest.mark.asyncio
    async def test_fresh_without_inflight_is_plain_revalidate(self, fake_client):
        cache = CredentialCache(fake_client)
        await cache.revalidate(fresh=True)
        assert fake_client.list_calls == 1


class TestCredentialCacheFailure:
    @pytest.mark.asyncio
    async def test_failed_revalidate_keeps_previous_snapshot(self, fake_client):
        cache = CredentialCache(fake_client)
        before = await cache.revalidate()

        fake_client.list_error = ProtocolError("HTTP 500: boom", status_code=500)
        with pytest.raises(ProtocolError):
            await cache.revalidate()

        assert cache.read() is before
        assert cache.is_loading() is False

    @pytest.mark.asyncio
    async def test_failure_is_not_sent_to_subscribers(self, fake_client):
        cache = CredentialCache(fake_client)
        callback = MagicMock()
        cache.subscribe(callback)
        await cache.revalidate()
        callback.assert_called_once()

        fake_client.list_error = TransportError("down")
        with pytest.raises(TransportError):
            await cache.revalidate()
        callback.assert_called_once()

    @pytest.mark.asyncio
    async def test_cache_recovers_after_failure(self, fake_client, logins):
        fake_client.list_error = TransportError("down")
        cache = CredentialCache(fake_client)
        with pytest.raises(TransportError):
            await cache.revalidate()
        fake_client.list_error = None
        assert await cache.revalidate() == tuple(logins)


class TestCredentialCacheSubscriptions:
    @pytest.mark.asyncio
    async def test_subscribers_receive_new_snapshot(self, fake_client, logins):
        cache = CredentialCache(fake_client)
        table, search = MagicMock(), MagicMock()
        cache.subscribe(table)
        cache.subscribe(search)
        await cache.revalidate()
        table.assert_called_once_with(tuple(logins))
        search.assert_called_once_with(tuple(logins))

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_notifications(self, fake_client):
        cache = CredentialCache(fake_client)
        callback = MagicMock()
        cache.subscribe(callback)
        cache.unsubscribe(callback)
        await cache.revalidate()
        callback.assert_not_called()
        assert cache.subscriber_count == 0

    def test_subscribe_twice_registers_once(self, fake_client):
        cache = CredentialCache(fake_client)
        callback = MagicMock()
        cache.subscribe(callback)
        cache.subscribe(callback)
        assert cache.subscriber_count == 1

    def test_unsubscribe_unknown_callback_is_ignored(self, fake_client):
        cache = CredentialCache(fake_client)
        cache.unsubscribe(MagicMock())
        assert cache.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_break_others(self, fake_client, logins):
        cache = CredentialCache(fake_client)
        broken = MagicMock(side_effect=RuntimeError("render failed"))
        healthy = MagicMock()
        cache.subscribe(broken)
        cache.subscribe(healthy)
        snapshot = await cache.revalidate()
        healthy.assert_called_once_with(tuple(logins))
        assert cache.read() is snapshot


class TestCreateThenSee:
    @pytest.mark.asyncio
    async def test_created_record_visible_only_after_revalidate(self, fake_client):
        cache = CredentialCache(fake_client)
        await cache.revalidate()

        created = await fake_client.create(
            NewCredential(url="https://example.com", username="alice", password="s3cret")
        )
        assert all(c.id != created.id for c in cache.read())

        snapshot = await cache.revalidate()
        match = next(c for c in snapshot if c.id == created.id)
        assert match.url == "https://example.com"
        assert match.username == "alice"
