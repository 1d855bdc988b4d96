#!/usr/bin/env python3
"""Application info, bundled dependencies and update checks."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from syncclip.gateway import GATEWAY_ERRORS
from syncclip.models import AppInfo, DependencyInfo

if TYPE_CHECKING:
    from syncclip.gateway import CommandGateway

logger = logging.getLogger(__name__)


class UpdateStatus(enum.Enum):
    AVAILABLE = "available"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"


@dataclass(frozen=True)
class UpdateCheck:
    """Outcome of an update check.

    A failed check is never reported as "up to date".
    """

    status: UpdateStatus
    version: str | None = None
    error: str | None = None


class AboutPanel:
    """Read-only engine metadata."""

    def __init__(self, gateway: CommandGateway) -> None:
        self.gateway = gateway
        self.app_info: AppInfo | None = None
        self.dependencies: list[DependencyInfo] = []

    async def load_app_info(self) -> bool:
        try:
            self.app_info = AppInfo.from_dict(await self.gateway.call("get_app_info"))
        except (*GATEWAY_ERRORS, AttributeError, KeyError, TypeError) as e:
            logger.warning("Failed to load app info: %s", e)
            return False
        return True

    async def load_dependencies(self) -> bool:
        try:
            raw = await self.gateway.call("get_dependencies")
            self.dependencies = [DependencyInfo.from_dict(d) for d in raw or []]
        except (*GATEWAY_ERRORS, AttributeError, KeyError, TypeError) as e:
            logger.warning("Failed to load dependencies: %s", e)
            return False
        return True

    async def check_update(self) -> UpdateCheck:
        """Ask the engine whether a newer release exists."""
        try:
            newer = await self.gateway.call("check_update")
        except GATEWAY_ERRORS as e:
            logger.warning("Update check failed: %s", e)
            return UpdateCheck(UpdateStatus.FAILED, error=str(e))
        if newer:
            return UpdateCheck(UpdateStatus.AVAILABLE, version=str(newer))
        return UpdateCheck(UpdateStatus.UP_TO_DATE)
