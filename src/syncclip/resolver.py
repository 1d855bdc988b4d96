#!/usr/bin/env python3
"""Resource URL resolution for stored clipboard binaries."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from syncclip.config_model import ServerConfig

# Wildcard bind addresses cannot be fetched from; use loopback instead.
_LOOPBACK_FOR_WILDCARD: dict[str, str] = {
    "0.0.0.0": "127.0.0.1",
    "::": "::1",
}


def resolve_resource_url(filename: str, server: ServerConfig) -> str:
    """Build the URL serving a stored file from the local sync server.

    Args:
        filename: Stored file name as reported by the engine. Inserted
            verbatim; it is already in the form the server expects.
        server: Server section of the current configuration.

    Returns:
        "http://<host>:<port>/file/<filename>".
    """
    host = _LOOPBACK_FOR_WILDCARD.get(server.host, server.host)
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"http://{host}:{server.port}/file/{filename}"
