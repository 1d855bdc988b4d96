#!/usr/bin/env python3
"""Tests for fetching stored resources over HTTP."""
import httpx
import pytest

from syncclip.config_model import Configuration
from syncclip.resolver import resolve_resource_url
from syncclip.resources import ResourceUnavailable, fetch_resource, probe_resource

URL = "http://127.0.0.1:5033/file/shot.png"


def serve(status: int, body: bytes = b"") -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/file/shot.png"
        return httpx.Response(status, content=body)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_fetch_returns_body() -> None:
    data = await fetch_resource(URL, transport=serve(200, b"\x89PNG"))
    assert data == b"\x89PNG"


@pytest.mark.asyncio
async def test_fetch_not_found_raises() -> None:
    with pytest.raises(ResourceUnavailable, match="404"):
        await fetch_resource(URL, transport=serve(404))


@pytest.mark.asyncio
async def test_fetch_connection_error_raises() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ResourceUnavailable, match="connection refused"):
        await fetch_resource(URL, transport=httpx.MockTransport(refuse))


@pytest.mark.asyncio
async def test_probe() -> None:
    assert await probe_resource(URL, transport=serve(200, b"ok")) is True
    assert await probe_resource(URL, transport=serve(500)) is False


@pytest.mark.asyncio
async def test_out_of_range_port_is_unavailable() -> None:
    """Test a coerced but unusable server port hides the image."""
    server = Configuration().with_field("server", "port", "70000").server
    url = resolve_resource_url("shot.png", server)

    assert await probe_resource(url) is False
    with pytest.raises(ResourceUnavailable):
        await fetch_resource(url)


@pytest.mark.asyncio
async def test_control_character_filename_is_unavailable() -> None:
    """Test a stored name that cannot form a URL hides the image."""
    url = resolve_resource_url("shot\n.png", Configuration().server)

    assert await probe_resource(url, transport=serve(200, b"ok")) is False
    with pytest.raises(ResourceUnavailable, match="shot"):
        await fetch_resource(url, transport=serve(200, b"ok"))
