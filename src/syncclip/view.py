#!/usr/bin/env python3
"""Live terminal view of the clipboard history.

Mounting the view loads the configuration (for the resource host/port)
and starts the history reconciler's polling; every change redraws the
screen. SIGINT/SIGTERM unmount it: polling stops and responses still in
flight are ignored.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress
from typing import TYPE_CHECKING, Awaitable, Callable

import click

from syncclip.config_store import ConfigStore
from syncclip.constants import REFRESH_INTERVAL
from syncclip.history import HistoryReconciler
from syncclip.history_render import render_history
from syncclip.models import EntryKind
from syncclip.resolver import resolve_resource_url
from syncclip.resources import probe_resource

if TYPE_CHECKING:
    from syncclip.gateway import CommandGateway

logger = logging.getLogger(__name__)


class HistoryView:
    """History screen: reconciler, config for resource URLs, and image probes.

    Attributes:
        history: The mounted history reconciler.
        config: Config store supplying the server host/port.
        unavailable: Ids of image entries whose resource failed to load.
    """

    def __init__(
        self,
        gateway: CommandGateway,
        interval: float = REFRESH_INTERVAL,
        probe: Callable[[str], Awaitable[bool]] = probe_resource,
        echo: Callable[[str], None] = click.echo,
        clear_screen: Callable[[], None] = click.clear,
    ) -> None:
        self._redraw = asyncio.Event()
        self.history = HistoryReconciler(gateway, interval=interval, on_change=self._redraw.set)
        self.config = ConfigStore(gateway)
        self.unavailable: set[int] = set()
        self._probed: set[int] = set()
        self._probe = probe
        self._echo = echo
        self._clear_screen = clear_screen

    def resource_url(self, filename: str) -> str:
        return resolve_resource_url(filename, self.config.config.server)

    def render(self) -> str:
        text = render_history(
            self.history.entries,
            self.resource_url,
            self.unavailable,
            self.history.copied_id,
        )
        if self.history.last_error:
            text += f"\n\n(showing last known history) {self.history.last_error}"
        return text

    async def probe_new_images(self) -> None:
        """Probe each image entry once; failures switch it to a placeholder."""
        current = {entry.id for entry in self.history.entries}
        self._probed &= current
        self.unavailable &= current
        for entry in self.history.entries:
            if entry.kind is not EntryKind.IMAGE or not entry.file_ref:
                continue
            if entry.id in self._probed:
                continue
            self._probed.add(entry.id)
            if not await self._probe(self.resource_url(entry.file_ref)):
                logger.debug("Image for entry %d unavailable", entry.id)
                self.unavailable.add(entry.id)

    async def run(self, shutdown: asyncio.Event) -> None:
        """Mount, redraw on every change until shutdown is set, then unmount."""
        await self.config.load()
        self.history.start()
        try:
            while not shutdown.is_set():
                redraw_task = asyncio.create_task(self._redraw.wait())
                shutdown_task = asyncio.create_task(shutdown.wait())
                done, pending = await asyncio.wait(
                    {redraw_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
                )
                for task in pending:
                    task.cancel()
                    with suppress(asyncio.CancelledError):
                        await task
                if redraw_task in done:
                    self._redraw.clear()
                    await self.probe_new_images()
                    self._clear_screen()
                    self._echo(self.render())
        finally:
            await self.history.stop()


async def run_watch(gateway: CommandGateway, interval: float = REFRESH_INTERVAL) -> None:
    """Run the live history view until SIGINT or SIGTERM.

    Args:
        gateway: Command gateway to the engine.
        interval: Refresh interval in seconds.
    """
    shutdown_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_requested.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_requested.set)
    try:
        await HistoryView(gateway, interval=interval).run(shutdown_requested)
    finally:
        loop.remove_signal_handler(signal.SIGINT)
        loop.remove_signal_handler(signal.SIGTERM)
