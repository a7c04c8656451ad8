"""Unit tests for ToolSupervisor shutdown and reload."""

import asyncio

import pytest

from toolhub_server.notifications import EVENT_PROVIDERS_DISCONNECTED, ChangeNotifier
from toolhub_server.tools import LoadState, ToolRegistry, ToolSupervisor


@pytest.mark.asyncio
async def test_shared_connection_disconnected_once(make_connection, make_discovery):
    """Three tools on one connection still mean a single disconnect."""
    shared = make_connection("shared", "a", "b", "c")
    registry = ToolRegistry(make_discovery([shared]))
    await registry.load_if_needed()
    supervisor = ToolSupervisor(registry)

    count = await supervisor.shutdown()

    assert count == 1
    assert shared.disconnect_calls == 1


@pytest.mark.asyncio
async def test_shutdown_disconnects_every_provider(make_connection, make_discovery):
    first = make_connection("first", "a")
    second = make_connection("second", "b")
    registry = ToolRegistry(make_discovery([first, second]))
    await registry.load_if_needed()
    supervisor = ToolSupervisor(registry)

    assert await supervisor.shutdown() == 2

    assert first.disconnect_calls == 1
    assert second.disconnect_calls == 1
    assert registry.tools == []
    assert registry.state is LoadState.NOT_LOADED


@pytest.mark.asyncio
async def test_shutdown_twice_is_idempotent(make_connection, make_discovery):
    connection = make_connection("p", "a")
    registry = ToolRegistry(make_discovery([connection]))
    await registry.load_if_needed()
    supervisor = ToolSupervisor(registry)

    await supervisor.shutdown()
    second = await supervisor.shutdown()

    assert second == 0
    assert connection.disconnect_calls == 1


@pytest.mark.asyncio
async def test_overlapping_shutdowns_disconnect_once(make_connection, make_discovery):
    connection = make_connection("p", "a", "b")
    registry = ToolRegistry(make_discovery([connection]))
    await registry.load_if_needed()
    supervisor = ToolSupervisor(registry)

    await asyncio.gather(supervisor.shutdown(), supervisor.shutdown())

    assert connection.disconnect_calls == 1


@pytest.mark.asyncio
async def test_shutdown_continues_past_failures(make_connection, make_discovery, caplog):
    """A failing disconnect is logged and the others still run."""
    broken = make_connection("broken", "a", fail_disconnect=True)
    healthy = make_connection("healthy", "b")
    registry = ToolRegistry(make_discovery([broken, healthy]))
    await registry.load_if_needed()
    supervisor = ToolSupervisor(registry)

    count = await supervisor.shutdown()

    assert count == 1
    assert broken.disconnect_calls == 1
    assert healthy.disconnect_calls == 1
    assert "Failed to disconnect provider 'broken'" in caplog.text


@pytest.mark.asyncio
async def test_shutdown_during_load_disconnects_partial_catalog(
    make_connection, make_discovery
):
    """An in-flight load is cancelled and the providers it committed are closed."""
    gate = asyncio.Event()
    first = make_connection("first", "a")
    second = make_connection("second", "b")
    registry = ToolRegistry(make_discovery([first, second], gate=gate))
    supervisor = ToolSupervisor(registry)

    loader = asyncio.create_task(registry.load_if_needed())
    while not registry.tools:
        await asyncio.sleep(0)

    await supervisor.shutdown()
    await loader

    assert first.disconnect_calls == 1
    assert second.disconnect_calls == 0
    assert registry.load_task is None


@pytest.mark.asyncio
async def test_shutdown_without_catalog(make_discovery):
    supervisor = ToolSupervisor(ToolRegistry(make_discovery()))

    assert await supervisor.shutdown() == 0


@pytest.mark.asyncio
async def test_shutdown_publishes_event(make_connection, make_discovery):
    notifier = ChangeNotifier()
    registry = ToolRegistry(make_discovery([make_connection("p", "a")]), notifier=notifier)
    await registry.load_if_needed()
    queue = notifier.subscribe()

    await ToolSupervisor(registry).shutdown()

    event = queue.get_nowait()
    assert event["event"] == EVENT_PROVIDERS_DISCONNECTED
    assert event["count"] == 1


@pytest.mark.asyncio
async def test_no_respawn_until_next_load(make_connection, make_discovery):
    """After shutdown providers stay down; reload brings up fresh connections."""
    discovery = make_discovery([make_connection("p", "a")])
    registry = ToolRegistry(discovery)
    await registry.load_if_needed()
    supervisor = ToolSupervisor(registry)
    old = registry.connections()[0]

    await supervisor.shutdown()
    assert discovery.passes == 1

    discovery.connections = [make_connection("p", "a")]
    await supervisor.reload()

    assert discovery.passes == 2
    assert registry.is_loaded
    new = registry.connections()[0]
    assert new is not old
    assert old.disconnect_calls == 1
    assert new.disconnect_calls == 0
