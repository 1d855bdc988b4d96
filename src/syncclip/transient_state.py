#!/usr/bin/env python3
"""Values that reset themselves after a fixed window.

Used for short-lived feedback: the "copied" mark on a history entry or
network address, and the "saved" status of a config save. Setting the value again while the
window is open restarts the window; timers never stack, so the value
clears exactly one window after the most recent set.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class TransientValue(Generic[T]):
    """A value that reverts to its resting value after ``window`` seconds.

    Attributes:
        window: Seconds a set value stays visible.
        resting: Value held when nothing is being shown.
        on_change: Called after every change, including the automatic reset.
    """

    def __init__(
        self,
        window: float,
        resting: T,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.window = window
        self.resting = resting
        self.on_change = on_change
        self._value: T = resting
        self._handle: asyncio.TimerHandle | None = None

    @property
    def value(self) -> T:
        return self._value

    def show(self, value: T) -> None:
        """Show value for one window, replacing any pending reset.

        Must be called from within a running event loop.
        """
        self._cancel_timer()
        self._value = value
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.window, self._expire)
        self._notify()

    def hold(self, value: T) -> None:
        """Show value with no expiry until the next show/hold/reset."""
        self._cancel_timer()
        self._value = value
        self._notify()

    def reset(self) -> None:
        """Return to the resting value immediately."""
        self._cancel_timer()
        if self._value != self.resting:
            self._value = self.resting
            self._notify()

    def _expire(self) -> None:
        self._handle = None
        self._value = self.resting
        self._notify()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
