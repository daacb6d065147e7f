# tests/test_registry.py
import asyncio
import time

import pytest

from mcp_cloud_browser.decorators import ensure_session
from mcp_cloud_browser.errors import ProviderConnectionError
from mcp_cloud_browser.notifications import NotificationEmitter
from mcp_cloud_browser.registry import SessionRegistry
from mcp_cloud_browser.resources import ResourceCatalog
from mcp_cloud_browser.tools.models import SessionArgs

from _utils import FakeClientSession, FakePage, FakeProvider, make_context


def make_registry(provider=None, **kwargs):
    catalog = ResourceCatalog()
    emitter = NotificationEmitter()
    registry = SessionRegistry(provider or FakeProvider(), catalog, emitter, **kwargs)
    return registry, catalog, emitter


def test_resolve_creates_once_and_reuses(event_loop):
    provider = FakeProvider()
    registry, _, _ = make_registry(provider)

    async def run():
        first = await registry.resolve("a")
        second = await registry.resolve("a")
        return first, second

    first, second = event_loop.run_until_complete(run())
    assert first is second
    assert provider.connects == 1
    assert "a" in registry and len(registry) == 1


def test_concurrent_resolve_same_id_opens_one_browser(event_loop):
    provider = FakeProvider(delay=0.01)
    registry, _, _ = make_registry(provider)

    async def run():
        return await asyncio.gather(*(registry.resolve("shared") for _ in range(5)))

    sessions = event_loop.run_until_complete(run())
    assert provider.connects == 1
    assert all(s is sessions[0] for s in sessions)


def test_concurrent_resolve_distinct_ids_do_not_serialize(event_loop):
    provider = FakeProvider(delay=0.01)
    registry, _, _ = make_registry(provider)

    async def run():
        return await asyncio.gather(registry.resolve("a"), registry.resolve("b"))

    a, b = event_loop.run_until_complete(run())
    assert a is not b
    assert provider.connects == 2
    assert sorted(s["id"] for s in registry.list()) == ["a", "b"]


def test_create_replaces_and_closes_previous(event_loop):
    provider = FakeProvider()
    registry, _, _ = make_registry(provider)

    async def run():
        old = await registry.resolve("a")
        new = await registry.create("a")
        return old, new

    old, new = event_loop.run_until_complete(run())
    assert old is not new
    assert old.browser.closed is True
    assert new.browser.closed is False
    assert registry.get("a") is new
    assert len(registry) == 1


def test_provider_failure_is_wrapped_and_registry_unchanged(event_loop):
    provider = FakeProvider(fail=RuntimeError("401 Unauthorized"))
    registry, _, _ = make_registry(provider)

    with pytest.raises(ProviderConnectionError) as ei:
        event_loop.run_until_complete(registry.resolve("a"))

    assert "401 Unauthorized" in str(ei.value)
    assert "a" not in registry


def test_provider_connection_error_passes_through(event_loop):
    err = ProviderConnectionError("Browserbase rejected the API key or project id")
    registry, _, _ = make_registry(FakeProvider(fail=err))

    with pytest.raises(ProviderConnectionError) as ei:
        event_loop.run_until_complete(registry.create("a"))
    assert ei.value is err


def test_console_events_are_logged_in_order_and_pushed(event_loop):
    registry, catalog, emitter = make_registry()
    client = FakeClientSession()
    emitter.bind(client)

    async def run():
        session = await registry.resolve("a")
        session.page.emit_console("log", "hello")
        session.page.emit_console("error", "boom")
        session.page.emit_console("warn", "careful")
        await emitter.drain()

    event_loop.run_until_complete(run())

    assert catalog.log_lines() == [
        "[Session a][log] hello",
        "[Session a][error] boom",
        "[Session a][warn] careful",
    ]
    assert client.log_messages == [
        ("info", "[Session a][log] hello", "console"),
        ("error", "[Session a][error] boom", "console"),
        ("warning", "[Session a][warn] careful", "console"),
    ]


def test_console_subscription_failure_does_not_fail_creation(event_loop):
    provider = FakeProvider(page_factory=lambda: FakePage(console_supported=False))
    registry, catalog, _ = make_registry(provider)

    session = event_loop.run_until_complete(registry.resolve("a"))
    assert session.session_id == "a"
    assert catalog.log_lines() == []


def test_close_and_close_unknown(event_loop):
    registry, _, _ = make_registry()

    async def run():
        session = await registry.resolve("a")
        closed = await registry.close("a")
        again = await registry.close("a")
        return session, closed, again

    session, closed, again = event_loop.run_until_complete(run())
    assert closed is True
    assert again is False
    assert session.browser.closed is True
    assert "a" not in registry


def test_close_all(event_loop):
    provider = FakeProvider()
    registry, _, _ = make_registry(provider)

    async def run():
        await registry.resolve("a")
        await registry.resolve("b")
        await registry.close_all()

    event_loop.run_until_complete(run())
    assert len(registry) == 0
    assert all(b.closed for b in provider.browsers)


def test_reap_idle_closes_only_expired_sessions(event_loop):
    registry, _, _ = make_registry(idle_timeout=60)

    async def run():
        old = await registry.resolve("old")
        fresh = await registry.resolve("fresh")
        old.last_used = 1000.0
        fresh.last_used = 1100.0
        return old, await registry.reap_idle(now=1100.0)

    old, expired = event_loop.run_until_complete(run())
    assert expired == ["old"]
    assert old.browser.closed is True
    assert "fresh" in registry and "old" not in registry


def test_reaping_disabled_with_zero_timeout(event_loop):
    registry, _, _ = make_registry(idle_timeout=0)

    async def run():
        session = await registry.resolve("a")
        session.last_used = 0.0
        return await registry.reap_idle(now=10_000.0), registry.start_reaper()

    expired, task = event_loop.run_until_complete(run())
    assert expired == []
    assert task is None
    assert "a" in registry


def test_reaper_task_starts_and_stops(event_loop):
    registry, _, _ = make_registry(idle_timeout=60, reaper_interval=0.01)

    async def run():
        task = registry.start_reaper()
        assert registry.start_reaper() is task
        await asyncio.sleep(0.02)
        await registry.stop_reaper()
        return task

    task = event_loop.run_until_complete(run())
    assert task.cancelled()


def test_reaper_spares_session_used_during_sweep(event_loop):
    provider = FakeProvider(close_delay=0.05)
    registry, _, _ = make_registry(provider, idle_timeout=60)

    async def run():
        a = await registry.resolve("a")
        b = await registry.resolve("b")
        stale = time.time() - 120
        a.last_used = stale
        b.last_used = stale

        sweep = asyncio.get_running_loop().create_task(registry.reap_idle())
        # Let the sweep start closing "a" before "b" is picked up again.
        await asyncio.sleep(0.01)
        again = await registry.resolve("b")
        return a, b, again, await sweep

    a, b, again, closed = event_loop.run_until_complete(run())
    assert closed == ["a"]
    assert a.browser.closed is True
    assert again is b
    assert b.browser.closed is False
    assert "b" in registry


def test_reaper_skips_session_with_call_in_flight(event_loop):
    registry, _, _ = make_registry(idle_timeout=60)

    async def run():
        session = await registry.resolve("busy")
        async with registry.in_use(session):
            session.last_used = 0.0
            closed = await registry.reap_idle(now=10_000.0)
        return session, closed

    session, closed = event_loop.run_until_complete(run())
    assert closed == []
    assert session.active == 0
    assert "busy" in registry
    assert session.last_used > 0.0


def test_tool_call_holds_session_busy(event_loop):
    ctx = make_context(idle_timeout=60)
    seen = []

    @ensure_session
    async def handler(ctx, args, session):
        seen.append(session.active)
        session.last_used = 0.0
        return await ctx.registry.reap_idle(now=10_000.0)

    closed = event_loop.run_until_complete(handler(ctx, SessionArgs(sessionId="s")))
    assert seen == [1]
    assert closed == []
    assert ctx.registry.get("s").active == 0
