#!/usr/bin/env python3
"""
Netstring framing and JSON command envelopes.

Every exchange with the synchronization engine is one request frame and one
response frame on a fresh stream connection. Frames are netstrings:
<length>:<content>, where length is ASCII decimal digits, followed by a
colon, the raw content bytes, and a trailing comma.

Example: "12:Hello world!," encodes the 12-byte string "Hello world!".

Frame payloads are UTF-8 JSON:
- request:  {"command": "<name>", "args": {...}}
- response: {"ok": true, "result": ...} or {"ok": false, "error": "<message>"}
"""
from __future__ import annotations

import asyncio
import json
from typing import Any

# Maximum size of a frame payload in bytes (10 MB).
# History and config snapshots are far smaller; this bounds memory use.
MAX_CONTENT_SIZE: int = 10485760

# Maximum digits in the length field (8 digits allows up to 99999999 bytes).
# Enforced during parsing to prevent denial of service from huge length values.
MAX_LENGTH_DIGITS: int = 8


class ProtocolError(Exception):
    """
    Exception raised for protocol-level errors.

    Raised when netstring parsing fails due to invalid format, size
    violations, connection loss mid-frame, or when a frame does not carry
    a well-formed command envelope.
    """

    pass


def encode_netstring(data: bytes) -> bytes:
    """
    Encode raw bytes as a netstring.

    Args:
        data: Raw payload bytes to encode.

    Returns:
        Netstring-encoded bytes in format "<length>:<content>,".
    """
    length = len(data)
    return f"{length}:".encode("ascii") + data + b","


def validate_content_size(data: bytes) -> bool:
    """
    Check if payload size is within the allowed limit.

    Args:
        data: Raw payload bytes to validate.

    Returns:
        True if len(data) <= MAX_CONTENT_SIZE, False otherwise.
    """
    return len(data) <= MAX_CONTENT_SIZE


async def read_netstring(reader: asyncio.StreamReader) -> bytes:
    """
    Read and decode a netstring from an async stream.

    Args:
        reader: asyncio StreamReader to read from.

    Returns:
        Decoded content bytes.

    Raises:
        ProtocolError: On invalid format, size violation, or connection closed.
    """
    length_bytes = b""
    while len(length_bytes) < MAX_LENGTH_DIGITS + 1:
        byte = await reader.read(1)
        if not byte:
            raise ProtocolError("Connection closed while reading length field")
        if byte == b":":
            break
        if not byte.isdigit():
            raise ProtocolError(f"Invalid character in length field: {byte!r}")
        length_bytes += byte
    else:
        raise ProtocolError("Length field exceeds maximum digits")
    if not length_bytes:
        raise ProtocolError("Empty length field")
    length = int(length_bytes.decode("ascii"))
    if length > MAX_CONTENT_SIZE:
        raise ProtocolError(f"Content size {length} exceeds limit {MAX_CONTENT_SIZE}")
    try:
        content = await reader.readexactly(length)
    except asyncio.IncompleteReadError as e:
        raise ProtocolError(f"Connection closed after {e.partial!r} bytes") from e
    comma = await reader.read(1)
    if comma != b",":
        raise ProtocolError(f"Expected comma terminator, got {comma!r}")
    return content


def _encode_json(payload: dict[str, Any]) -> bytes:
    data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    if not validate_content_size(data):
        raise ProtocolError(f"Payload size {len(data)} exceeds limit {MAX_CONTENT_SIZE}")
    return encode_netstring(data)


def _decode_json(content: bytes) -> dict[str, Any]:
    try:
        payload = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProtocolError(f"Invalid JSON payload: {e}") from e
    if not isinstance(payload, dict):
        raise ProtocolError(f"Expected JSON object, got {type(payload).__name__}")
    return payload


def encode_request(command: str, args: dict[str, Any] | None = None) -> bytes:
    """
    Encode a command request frame.

    Args:
        command: Engine command name, e.g. "get_history".
        args: Command arguments; omitted arguments are sent as {}.

    Returns:
        Netstring-framed JSON request.
    """
    return _encode_json({"command": command, "args": args or {}})


def decode_response(content: bytes) -> tuple[bool, Any]:
    """
    Decode a response frame payload.

    Args:
        content: Decoded netstring content.

    Returns:
        (True, result) for success, (False, error message) for failure.

    Raises:
        ProtocolError: If the payload is not a response envelope.
    """
    payload = _decode_json(content)
    ok = payload.get("ok")
    if ok is True:
        return True, payload.get("result")
    if ok is False:
        return False, str(payload.get("error") or "unknown engine error")
    raise ProtocolError("Response is missing the ok flag")
