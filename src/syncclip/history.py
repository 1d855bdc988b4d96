#!/usr/bin/env python3
"""Clipboard history reconciliation.

The engine owns the history; this module keeps a disposable local copy
consistent with it. Every refresh replaces the whole collection, so
refreshes may overlap and complete in any order: whichever response
arrives last is what is shown, and it is always a complete server state.

Mutations (delete, pin, clear) are fire-and-refresh. Nothing is removed
or flipped locally ahead of the engine; a successful mutation is followed
by an immediate refresh, and a failed one leaves the list as it was.
The only optimistic state is the short-lived copy confirmation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable

from syncclip.clipboard import ClipboardError, write_clipboard_text
from syncclip.constants import COPY_CONFIRM_WINDOW, REFRESH_INTERVAL
from syncclip.gateway import GATEWAY_ERRORS
from syncclip.models import EntryKind, HistoryEntry
from syncclip.poller import Poller
from syncclip.transient_state import TransientValue

if TYPE_CHECKING:
    from syncclip.gateway import CommandGateway

logger = logging.getLogger(__name__)

# The engine's clear command deletes unpinned entries only; the prompt
# must say so.
CLEAR_CONFIRMATION: str = "Clear all unpinned history? Pinned entries are kept."


def order_entries(entries: Iterable[HistoryEntry]) -> list[HistoryEntry]:
    """Drop repeated ids (first occurrence wins) and sort newest first.

    Args:
        entries: Entries in engine response order.

    Returns:
        Entries with unique ids, sorted by id descending.
    """
    seen: set[int] = set()
    unique: list[HistoryEntry] = []
    for entry in entries:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        unique.append(entry)
    unique.sort(key=lambda e: e.id, reverse=True)
    return unique


class HistoryReconciler:
    """Local view of the engine's clipboard history.

    Attributes:
        gateway: Command gateway to the engine.
        entries: Current entries, newest first. Replaced, never patched.
        last_error: Message of the most recent failed call, or None.
        on_change: Called whenever entries or the copy confirmation change.
    """

    def __init__(
        self,
        gateway: CommandGateway,
        interval: float = REFRESH_INTERVAL,
        copy_window: float = COPY_CONFIRM_WINDOW,
        clipboard_writer: Callable[[str], None] = write_clipboard_text,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.gateway = gateway
        self.entries: list[HistoryEntry] = []
        self.last_error: str | None = None
        self.on_change = on_change
        self._clipboard_writer = clipboard_writer
        self._copied: TransientValue[int | None] = TransientValue(
            copy_window, None, on_change=self._notify
        )
        self._poller = Poller(self.refresh, interval)
        self._stopped = False

    @property
    def copied_id(self) -> int | None:
        """Id of the entry copied within the last confirmation window."""
        return self._copied.value

    @property
    def mounted(self) -> bool:
        return self._poller.running

    def find(self, entry_id: int) -> HistoryEntry | None:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def start(self) -> None:
        """Mount: refresh now and then on every interval tick."""
        self._stopped = False
        self._poller.start()

    async def stop(self) -> None:
        """Unmount: stop ticking and ignore responses still in flight."""
        self._stopped = True
        await self._poller.stop()
        self._copied.reset()

    async def refresh(self) -> bool:
        """Replace entries with the engine's current history.

        Returns:
            True if a new collection was applied. False if the call failed
            (entries untouched) or arrived after stop() (ignored).
        """
        try:
            raw = await self.gateway.call("get_history")
        except GATEWAY_ERRORS as e:
            self._record_failure("Failed to fetch history", e)
            return False
        try:
            entries = order_entries(HistoryEntry.from_dict(item) for item in raw or [])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            self._record_failure("Malformed history response", e)
            return False
        if self._stopped:
            logger.debug("Ignoring history response after stop")
            return False
        self.entries = entries
        self.last_error = None
        logger.debug("History refreshed: %d entries", len(entries))
        self._notify()
        return True

    def copy(self, entry: HistoryEntry) -> bool:
        """Copy a text entry to the platform clipboard.

        Non-text entries and empty text are a no-op. On success the entry
        is marked copied for one confirmation window; copying again
        restarts the window. Must be called from a running event loop.

        Returns:
            True if the clipboard was written.
        """
        if entry.kind is not EntryKind.TEXT or not entry.content:
            logger.debug("Entry %d has no text to copy", entry.id)
            return False
        try:
            self._clipboard_writer(entry.content)
        except ClipboardError as e:
            self._record_failure("Copy failed", e)
            return False
        self._copied.show(entry.id)
        return True

    async def delete(self, entry_id: int) -> bool:
        """Delete one entry on the engine, then refresh.

        Returns:
            True if the engine accepted the delete.
        """
        if not await self._mutate("delete_history_item", {"id": entry_id}):
            return False
        await self.refresh()
        return True

    async def clear_unpinned(self, confirm: Callable[[str], bool]) -> bool:
        """Clear every unpinned entry after explicit confirmation.

        Args:
            confirm: Asked with CLEAR_CONFIRMATION; nothing is sent unless
                it returns True.

        Returns:
            True if the engine accepted the clear.
        """
        if not confirm(CLEAR_CONFIRMATION):
            logger.debug("Clear declined")
            return False
        if not await self._mutate("clear_history"):
            return False
        await self.refresh()
        return True

    async def toggle_pin(self, entry_id: int) -> bool:
        """Flip an entry's pinned flag on the engine, then refresh."""
        if not await self._mutate("toggle_pin", {"id": entry_id}):
            return False
        await self.refresh()
        return True

    async def _mutate(self, command: str, args: dict[str, Any] | None = None) -> bool:
        try:
            await self.gateway.call(command, args)
        except GATEWAY_ERRORS as e:
            self._record_failure("History update failed", e)
            return False
        self.last_error = None
        return True

    def _record_failure(self, what: str, error: BaseException) -> None:
        logger.warning("%s: %s", what, error)
        self.last_error = f"{what}: {error}"

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
