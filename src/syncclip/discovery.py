#!/usr/bin/env python3
"""Peer discovery view.

Two questions are answered side by side and never merged:
- advertised peers: sync servers announcing themselves on the LAN
  ("who could I connect to");
- connected peers: devices with a recent session against the local
  server ("who is connected to me now").

A scan fetches both concurrently and replaces both lists together. If
either fetch fails, neither list changes. Local network interfaces are a
separate, independent fetch. Any listed IP can be copied to the clipboard
with a short confirmation, like history entries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable

from syncclip.clipboard import ClipboardError, write_clipboard_text
from syncclip.constants import COPY_CONFIRM_WINDOW
from syncclip.gateway import GATEWAY_ERRORS
from syncclip.models import AdvertisedPeer, ConnectedPeer, NetworkInfo
from syncclip.transient_state import TransientValue

if TYPE_CHECKING:
    from syncclip.gateway import CommandGateway

logger = logging.getLogger(__name__)

_DECODE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


class DiscoveryAggregator:
    """Read-only model of local interfaces and both peer lists.

    Attributes:
        lan_devices: Advertised peers from the last successful scan.
        connected_clients: Connected peers from the last successful scan.
        network_info: Local hostname and interfaces, once fetched.
        busy: True while a scan is in flight.
        last_error: Message of the most recent failed fetch or copy, or None.
    """

    def __init__(
        self,
        gateway: CommandGateway,
        on_change: Callable[[], None] | None = None,
        copy_window: float = COPY_CONFIRM_WINDOW,
        clipboard_writer: Callable[[str], None] = write_clipboard_text,
    ) -> None:
        self.gateway = gateway
        self.on_change = on_change
        self._clipboard_writer = clipboard_writer
        self._copied_ip: TransientValue[str | None] = TransientValue(
            copy_window, None, on_change=self._notify
        )
        self.lan_devices: list[AdvertisedPeer] = []
        self.connected_clients: list[ConnectedPeer] = []
        self.network_info: NetworkInfo | None = None
        self.busy = False
        self.last_error: str | None = None

    async def scan(self) -> bool:
        """Fetch advertised and connected peers and replace both lists.

        Returns:
            True if both lists were replaced. False if a scan was already
            in flight or if either fetch failed (both lists unchanged).
        """
        if self.busy:
            logger.debug("Scan already in progress")
            return False
        self.busy = True
        self._notify()
        try:
            advertised, connected = await asyncio.gather(
                self.gateway.call("get_lan_devices"),
                self.gateway.call("get_connected_clients"),
                return_exceptions=True,
            )
            for result in (advertised, connected):
                if isinstance(result, BaseException):
                    if not isinstance(result, GATEWAY_ERRORS):
                        raise result
                    self._record_failure("Device scan failed", result)
                    return False
            try:
                lan_devices = [AdvertisedPeer.from_dict(d) for d in advertised or []]
                connected_clients = [ConnectedPeer.from_dict(d) for d in connected or []]
            except _DECODE_ERRORS as e:
                self._record_failure("Malformed device list", e)
                return False
            self.lan_devices = lan_devices
            self.connected_clients = connected_clients
            self.last_error = None
            logger.debug(
                "Scan found %d advertised, %d connected",
                len(lan_devices),
                len(connected_clients),
            )
            return True
        finally:
            self.busy = False
            self._notify()

    async def fetch_network_info(self) -> bool:
        """Fetch local hostname and interfaces; keeps the old value on failure."""
        try:
            raw: Any = await self.gateway.call("get_network_info")
            info = NetworkInfo.from_dict(raw)
        except GATEWAY_ERRORS as e:
            self._record_failure("Failed to fetch network info", e)
            return False
        except _DECODE_ERRORS as e:
            self._record_failure("Malformed network info", e)
            return False
        self.network_info = info
        self._notify()
        return True

    @property
    def copied_ip(self) -> str | None:
        """IP copied within the last confirmation window."""
        return self._copied_ip.value

    def find_ip(self, name: str) -> str | None:
        """Look up the IP of an interface, advertised peer or connected peer by name.

        Interfaces are searched first, then advertised and connected peers.
        """
        interfaces = self.network_info.interfaces if self.network_info else []
        for item in (*interfaces, *self.lan_devices, *self.connected_clients):
            if item.name == name:
                return item.ip
        return None

    def copy_ip(self, ip: str) -> bool:
        """Copy an IP to the clipboard and mark it copied for one window.

        Must be called from a running event loop.
        """
        try:
            self._clipboard_writer(ip)
        except ClipboardError as e:
            self._record_failure("Copy failed", e)
            return False
        self._copied_ip.show(ip)
        return True

    def _record_failure(self, what: str, error: BaseException) -> None:
        logger.warning("%s: %s", what, error)
        self.last_error = f"{what}: {error}"

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
