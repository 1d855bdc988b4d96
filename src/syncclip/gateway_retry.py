#!/usr/bin/env python3
"""Waiting for the engine to come up.

The CLI can be started before the engine (for example from the same
session script). With --wait it blocks here, retrying with exponential
backoff via tenacity until the engine answers a harmless read command.

Only reachability is retried. Commands issued afterwards are never
retried automatically.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tenacity import retry, retry_if_exception_type, stop_never, wait_exponential

from syncclip.constants import INITIAL_WAIT, MAX_WAIT, WAIT_MULTIPLIER

if TYPE_CHECKING:
    from syncclip.gateway import CommandGateway

logger = logging.getLogger(__name__)

# Read-only command used as a liveness probe.
PROBE_COMMAND: str = "get_app_info"


@retry(
    wait=wait_exponential(
        multiplier=WAIT_MULTIPLIER,
        min=INITIAL_WAIT,
        max=MAX_WAIT,
    ),
    retry=retry_if_exception_type((ConnectionError, OSError)),
    stop=stop_never,
)
async def wait_for_engine(gateway: CommandGateway) -> Any:
    """Block until the engine accepts a connection and answers.

    Args:
        gateway: Gateway pointing at the engine.

    Returns:
        The probe command's result (the engine's app info).

    Note:
        Engine-reported failures (CommandError) and malformed responses
        (ProtocolError) are not retried: the engine is up but unhappy.
    """
    logger.debug("Probing engine at %s", gateway.address)
    try:
        return await gateway.call(PROBE_COMMAND)
    except ConnectionError:
        logger.warning("Engine at %s not reachable, will retry", gateway.address)
        raise
