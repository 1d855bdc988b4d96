#!/usr/bin/env python3
"""Tests for the peer discovery view."""
import asyncio
from typing import Any
from unittest.mock import MagicMock

import pytest
from conftest import FakeEngine, LoopbackGateway

from syncclip.clipboard import ClipboardError
from syncclip.discovery import DiscoveryAggregator
from syncclip.models import AdvertisedPeer, ConnectedPeer


@pytest.fixture
def discovery(gateway: LoopbackGateway) -> DiscoveryAggregator:
    return DiscoveryAggregator(gateway)


@pytest.mark.asyncio
async def test_scan_fills_both_lists(discovery: DiscoveryAggregator) -> None:
    assert await discovery.scan() is True
    assert discovery.lan_devices == [AdvertisedPeer("laptop", "192.168.1.31", 5033)]
    assert discovery.connected_clients == [ConnectedPeer("phone", "192.168.1.40", 1700000000)]
    assert discovery.busy is False
    assert discovery.last_error is None


@pytest.mark.asyncio
async def test_scan_issues_both_fetches(
    discovery: DiscoveryAggregator, engine: FakeEngine
) -> None:
    await discovery.scan()
    assert sorted(engine.command_names()) == ["get_connected_clients", "get_lan_devices"]


@pytest.mark.asyncio
async def test_partial_failure_changes_neither_list(
    discovery: DiscoveryAggregator, engine: FakeEngine, caplog: pytest.LogCaptureFixture
) -> None:
    """Test a failed connected-clients fetch also discards the advertised list."""
    await discovery.scan()
    engine.lan_devices = [{"name": "desktop", "ip": "192.168.1.50", "port": 5033}]
    engine.connected_clients = []
    engine.failures["get_connected_clients"] = "server not running"

    assert await discovery.scan() is False

    assert [p.name for p in discovery.lan_devices] == ["laptop"]
    assert [p.name for p in discovery.connected_clients] == ["phone"]
    assert "server not running" in discovery.last_error
    assert discovery.busy is False
    assert "Device scan failed" in caplog.text


@pytest.mark.asyncio
async def test_malformed_list_changes_neither_list(
    discovery: DiscoveryAggregator, engine: FakeEngine
) -> None:
    await discovery.scan()
    engine.lan_devices = [{"name": "desktop"}]

    assert await discovery.scan() is False
    assert [p.name for p in discovery.lan_devices] == ["laptop"]


@pytest.mark.asyncio
async def test_scan_while_busy_is_refused(engine: FakeEngine) -> None:
    """Test a second scan during an in-flight one sends nothing."""
    release = asyncio.Event()
    calls: list[str] = []

    class SlowGateway:
        async def call(self, command: str, args: Any = None) -> Any:
            calls.append(command)
            await release.wait()
            return []

    discovery = DiscoveryAggregator(SlowGateway())
    first = asyncio.create_task(discovery.scan())
    await asyncio.sleep(0)
    assert discovery.busy is True

    assert await discovery.scan() is False

    release.set()
    assert await first is True
    assert len(calls) == 2
    assert discovery.busy is False


@pytest.mark.asyncio
async def test_busy_changes_notify(gateway: LoopbackGateway) -> None:
    seen: list[bool] = []
    discovery = DiscoveryAggregator(gateway)
    discovery.on_change = lambda: seen.append(discovery.busy)

    await discovery.scan()

    assert seen == [True, False]


@pytest.mark.asyncio
async def test_unexpected_error_propagates(gateway: LoopbackGateway) -> None:
    """Test programming errors are not swallowed as scan failures."""
    discovery = DiscoveryAggregator(gateway)
    discovery.gateway = MagicMock()
    discovery.gateway.call.side_effect = RuntimeError("bug")

    with pytest.raises(RuntimeError):
        await discovery.scan()
    assert discovery.busy is False


@pytest.mark.asyncio
async def test_fetch_network_info(discovery: DiscoveryAggregator) -> None:
    assert await discovery.fetch_network_info() is True
    info = discovery.network_info
    assert info.hostname == "workstation"
    assert [i.name for i in info.interfaces] == ["enp3s0", "docker0"]
    assert info.interfaces[0].is_physical is True


@pytest.mark.asyncio
async def test_network_info_independent_of_scan(
    discovery: DiscoveryAggregator, engine: FakeEngine
) -> None:
    engine.failures["get_lan_devices"] = "mdns unavailable"

    assert await discovery.scan() is False
    assert await discovery.fetch_network_info() is True
    assert discovery.network_info is not None


@pytest.mark.asyncio
async def test_network_info_failure_keeps_old_value(
    discovery: DiscoveryAggregator, engine: FakeEngine
) -> None:
    await discovery.fetch_network_info()
    engine.failures["get_network_info"] = "no interfaces"

    assert await discovery.fetch_network_info() is False
    assert discovery.network_info.hostname == "workstation"


@pytest.mark.asyncio
async def test_find_ip_searches_interfaces_and_both_peer_lists(
    discovery: DiscoveryAggregator,
) -> None:
    assert discovery.find_ip("enp3s0") is None
    await discovery.fetch_network_info()
    await discovery.scan()

    assert discovery.find_ip("enp3s0") == "192.168.1.10"
    assert discovery.find_ip("laptop") == "192.168.1.31"
    assert discovery.find_ip("phone") == "192.168.1.40"
    assert discovery.find_ip("printer") is None


@pytest.mark.asyncio
async def test_copy_ip_shows_confirmation_for_one_window(gateway: LoopbackGateway) -> None:
    writer = MagicMock()
    changes = MagicMock()
    discovery = DiscoveryAggregator(
        gateway, on_change=changes, copy_window=0.05, clipboard_writer=writer
    )

    assert discovery.copy_ip("192.168.1.10") is True

    writer.assert_called_once_with("192.168.1.10")
    assert discovery.copied_ip == "192.168.1.10"
    await asyncio.sleep(0.1)
    assert discovery.copied_ip is None
    assert changes.call_count == 2


@pytest.mark.asyncio
async def test_copy_ip_failure_records_error(gateway: LoopbackGateway) -> None:
    writer = MagicMock(side_effect=ClipboardError("no clipboard"))
    discovery = DiscoveryAggregator(gateway, clipboard_writer=writer)

    assert discovery.copy_ip("192.168.1.10") is False
    assert discovery.copied_ip is None
    assert discovery.last_error == "Copy failed: no clipboard"
