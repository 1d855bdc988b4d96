#!/usr/bin/env python3
"""Command gateway to the synchronization engine.

The gateway is the only path from the client to the engine. Each call
opens a fresh stream connection (Unix domain socket or TCP), sends one
request frame, reads one response frame and closes, so the gateway holds
no per-call state and overlapping calls never interfere.

See protocol.py for the frame and envelope format.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from syncclip.protocol import ProtocolError, decode_response, encode_request, read_netstring

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """The engine received the command and reported a failure.

    Attributes:
        command: Name of the failed command.
        message: Error message reported by the engine.
    """

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"{command} failed: {message}")
        self.command = command
        self.message = message


# Every failure a gateway call can surface. Components catch this tuple at
# the call site and degrade instead of propagating.
GATEWAY_ERRORS: tuple[type[BaseException], ...] = (
    CommandError,
    ProtocolError,
    OSError,
    asyncio.TimeoutError,
)


@dataclass(frozen=True)
class EngineAddress:
    """Where the engine listens: a Unix socket path or a TCP host/port."""

    socket_path: str | None = None
    host: str | None = None
    port: int | None = None

    @classmethod
    def parse_tcp(cls, address: str) -> EngineAddress:
        """Parse "HOST:PORT" (IPv6 literals in brackets) into an address.

        Raises:
            ValueError: If the port is missing or not an integer.
        """
        host, sep, port = address.strip().rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError(f"Expected HOST:PORT, got {address!r}")
        return cls(host=host.strip("[]"), port=int(port))

    def __str__(self) -> str:
        if self.socket_path is not None:
            return self.socket_path
        return f"{self.host}:{self.port}"


async def connect_to_engine(
    address: EngineAddress,
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Open a stream connection to the engine.

    Args:
        address: Engine socket path or TCP endpoint.

    Returns:
        Tuple of (StreamReader, StreamWriter) for the connection.

    Raises:
        ConnectionError: If connection fails (socket not found, refused, etc).
    """
    try:
        if address.socket_path is not None:
            return await asyncio.open_unix_connection(address.socket_path)
        return await asyncio.open_connection(address.host, address.port)
    except OSError as e:
        raise ConnectionError(f"Failed to connect to {address}: {e}") from e


class CommandGateway:
    """Uniform request/response call into the engine."""

    def __init__(self, address: EngineAddress, timeout: float | None = None) -> None:
        self.address = address
        self.timeout = timeout

    async def call(self, command: str, args: dict[str, Any] | None = None) -> Any:
        """Invoke an engine command and return its decoded result.

        Args:
            command: Engine command name.
            args: Command arguments.

        Returns:
            The "result" member of the response (None for commands without one).

        Raises:
            CommandError: The engine reported a failure.
            ProtocolError: The response frame was malformed.
            ConnectionError: The engine could not be reached or hung up.
            asyncio.TimeoutError: The call exceeded the gateway timeout.
        """
        if self.timeout is None:
            return await self._exchange(command, args)
        return await asyncio.wait_for(self._exchange(command, args), timeout=self.timeout)

    async def _exchange(self, command: str, args: dict[str, Any] | None) -> Any:
        request = encode_request(command, args)
        reader, writer = await connect_to_engine(self.address)
        try:
            logger.debug("-> %s %s", command, args or {})
            writer.write(request)
            await writer.drain()
            content = await read_netstring(reader)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass  # Peer may have already reset the connection
        ok, value = decode_response(content)
        if not ok:
            logger.debug("<- %s error: %s", command, value)
            raise CommandError(command, value)
        logger.debug("<- %s ok", command)
        return value
