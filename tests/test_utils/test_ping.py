"""Tests for host reachability probing."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from rollout_mcp.utils.ping import check_host_online, check_hosts_online


@pytest.mark.asyncio
async def test_online_host() -> None:
    writer = MagicMock()
    writer.wait_closed = AsyncMock()

    with patch("asyncio.open_connection", new_callable=AsyncMock, return_value=(MagicMock(), writer)):
        assert await check_host_online("10.0.0.1", 22) is True

    writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_refused_host() -> None:
    with patch("asyncio.open_connection", new_callable=AsyncMock, side_effect=OSError("refused")):
        assert await check_host_online("10.0.0.1", 22) is False


@pytest.mark.asyncio
async def test_timeout_host() -> None:
    with patch("asyncio.open_connection", new_callable=AsyncMock, side_effect=asyncio.TimeoutError):
        assert await check_host_online("10.0.0.1", 22, timeout=0.1) is False


@pytest.mark.asyncio
async def test_many_hosts_keep_order() -> None:
    async def fake_check(hostname: str, port: int, timeout: float) -> bool:
        return hostname != "down"

    with patch("rollout_mcp.utils.ping.check_host_online", side_effect=fake_check):
        result = await check_hosts_online({"b": ("up", 22), "a": ("down", 22)})

    assert list(result.items()) == [("b", True), ("a", False)]


@pytest.mark.asyncio
async def test_no_hosts() -> None:
    assert await check_hosts_online({}) == {}
