#!/usr/bin/env python3
"""Fetching stored clipboard binaries from the local sync server.

Image and file entries reference a stored file that the sync server
serves over plain HTTP (see resolver.py for the URL). This is the only
network access besides the command gateway. Failures never break the
view: probes report False, downloads raise ResourceUnavailable.
"""

from __future__ import annotations

import logging

import httpx

from syncclip.constants import RESOURCE_TIMEOUT

logger = logging.getLogger(__name__)


class ResourceUnavailable(Exception):
    """The stored resource could not be fetched."""

    pass


async def fetch_resource(
    url: str,
    timeout: float = RESOURCE_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bytes:
    """Download a stored resource.

    Args:
        url: Resolved resource URL.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests inject a mock).

    Returns:
        Response body bytes.

    Raises:
        ResourceUnavailable: On a malformed URL, connection failure, timeout
            or non-2xx status.
    """
    # OverflowError comes from a port outside 0-65535.
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        try:
            response = await client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL, OverflowError, ValueError) as e:
            raise ResourceUnavailable(f"{url}: {e}") from e
    logger.debug("Fetched %d bytes from %s", len(response.content), url)
    return response.content


async def probe_resource(
    url: str,
    timeout: float = RESOURCE_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Return True if the resource loads, False otherwise."""
    try:
        await fetch_resource(url, timeout=timeout, transport=transport)
    except ResourceUnavailable as e:
        logger.debug("Resource unavailable: %s", e)
        return False
    return True
