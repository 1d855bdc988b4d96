#!/usr/bin/env python3
"""Tests for waiting on the engine with backoff."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from tenacity import RetryError, stop_after_attempt, wait_none

from syncclip.gateway import CommandError, EngineAddress
from syncclip.gateway_retry import PROBE_COMMAND, wait_for_engine

# Same retry policy without the real backoff delays.
fast_wait_for_engine = wait_for_engine.retry_with(wait=wait_none(), stop=stop_after_attempt(5))


@pytest.fixture
def mock_gateway() -> MagicMock:
    gateway = MagicMock()
    gateway.address = EngineAddress(socket_path="/tmp/engine.sock")
    gateway.call = AsyncMock()
    return gateway


@pytest.mark.asyncio
async def test_returns_probe_result_when_engine_is_up(mock_gateway: MagicMock) -> None:
    """Test an engine that answers at once is not retried."""
    mock_gateway.call.return_value = {"name": "SyncClipboard"}

    assert await fast_wait_for_engine(mock_gateway) == {"name": "SyncClipboard"}
    mock_gateway.call.assert_called_once_with(PROBE_COMMAND)


@pytest.mark.asyncio
async def test_retries_until_engine_answers(
    mock_gateway: MagicMock, caplog: pytest.LogCaptureFixture
) -> None:
    """Test connection failures are retried and logged until success."""
    mock_gateway.call.side_effect = [
        ConnectionError("refused"),
        ConnectionError("refused"),
        {"name": "SyncClipboard"},
    ]

    with caplog.at_level("WARNING"):
        result = await fast_wait_for_engine(mock_gateway)

    assert result == {"name": "SyncClipboard"}
    assert mock_gateway.call.call_count == 3
    assert "not reachable" in caplog.text


@pytest.mark.asyncio
async def test_gives_up_only_when_stop_policy_says_so(mock_gateway: MagicMock) -> None:
    """Test an engine that never appears keeps being probed."""
    mock_gateway.call.side_effect = ConnectionError("refused")

    with pytest.raises(RetryError):
        await fast_wait_for_engine(mock_gateway)
    assert mock_gateway.call.call_count == 5


@pytest.mark.asyncio
async def test_engine_reported_failure_is_not_retried(mock_gateway: MagicMock) -> None:
    """Test a reachable but failing engine is not retried."""
    mock_gateway.call.side_effect = CommandError(PROBE_COMMAND, "not ready")

    with pytest.raises(CommandError):
        await fast_wait_for_engine(mock_gateway)
    mock_gateway.call.assert_called_once()
