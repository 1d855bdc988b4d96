#!/usr/bin/env python3
"""Client-side holder of the engine configuration.

Exactly one Configuration snapshot is held at a time. Until the engine's
snapshot arrives the store exposes the documented defaults; those are a
display placeholder and are never saved on their own. Edits replace the
in-memory snapshot only. Save sends the whole snapshot; last writer wins.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any, Callable

from syncclip.config_model import Configuration, default_configuration
from syncclip.constants import SAVE_STATUS_WINDOW
from syncclip.gateway import GATEWAY_ERRORS, CommandError
from syncclip.transient_state import TransientValue

if TYPE_CHECKING:
    from syncclip.gateway import CommandGateway

logger = logging.getLogger(__name__)


class SaveStatus(enum.Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class ConfigStore:
    """Load, edit and save the engine configuration.

    Attributes:
        config: Current snapshot (defaults until load() succeeds).
        loaded: True once a snapshot has been received from the engine.
        status_message: Engine message for the last failed save, or None.
    """

    def __init__(
        self,
        gateway: CommandGateway,
        status_window: float = SAVE_STATUS_WINDOW,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.gateway = gateway
        self.on_change = on_change
        self.config: Configuration = default_configuration()
        self.loaded = False
        self.status_message: str | None = None
        self._status: TransientValue[SaveStatus] = TransientValue(
            status_window, SaveStatus.IDLE, on_change=self._notify
        )

    @property
    def status(self) -> SaveStatus:
        """SAVED clears back to IDLE after the status window; ERROR stays
        until the next save attempt."""
        return self._status.value

    async def load(self) -> bool:
        """Replace the snapshot with the engine's configuration.

        Returns:
            True on success. On failure the current snapshot is kept.
        """
        try:
            raw: Any = await self.gateway.call("get_config")
            config = Configuration.from_dict(raw)
        except GATEWAY_ERRORS as e:
            logger.warning("Failed to load config: %s", e)
            return False
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Malformed config snapshot: %s", e)
            return False
        self.config = config
        self.loaded = True
        self._notify()
        return True

    def edit(self, section: str, field: str, value: Any) -> Configuration:
        """Merge one field into the in-memory snapshot. Nothing is sent.

        Raises:
            ConfigFieldError: If section.field is not user-editable.
        """
        self.config = self.config.with_field(section, field, value)
        self._notify()
        return self.config

    async def save(self) -> bool:
        """Send the whole snapshot to the engine.

        The in-memory snapshot is kept as edited whatever the outcome, so a
        failed save can simply be retried.

        Returns:
            True if the engine accepted the snapshot.
        """
        snapshot = self.config
        self.status_message = None
        self._status.hold(SaveStatus.SAVING)
        try:
            await self.gateway.call("save_config", {"config": snapshot.to_dict()})
        except GATEWAY_ERRORS as e:
            logger.error("Failed to save config: %s", e)
            self.status_message = e.message if isinstance(e, CommandError) else str(e)
            self._status.hold(SaveStatus.ERROR)
            return False
        logger.debug("Config saved")
        self._status.show(SaveStatus.SAVED)
        return True

    async def check_port_available(self, port: int) -> bool | None:
        """Ask the engine whether port can be bound. None if the query failed."""
        try:
            return bool(await self.gateway.call("check_port_available", {"port": port}))
        except GATEWAY_ERRORS as e:
            logger.warning("Port check failed: %s", e)
            return None

    async def find_available_port(self, start_port: int) -> int | None:
        """Ask the engine for the first bindable port from start_port."""
        try:
            return int(await self.gateway.call("find_available_port", {"start_port": start_port}))
        except (*GATEWAY_ERRORS, TypeError, ValueError) as e:
            logger.warning("Port search failed: %s", e)
            return None

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
