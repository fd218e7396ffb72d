"""Tests for MCP resources."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from rollout_mcp.config import Config
from rollout_mcp.models import RunOutcome, SchedulerState
from rollout_mcp.resources import last_run_resource, list_hosts_resource
from rollout_mcp.services import reset_state, set_config, set_last_outcome


@pytest.fixture(autouse=True)
def isolated_state():
    reset_state()
    yield
    reset_state()


@pytest.mark.asyncio
async def test_hosts_resource_lists_reachability(tmp_path: Path) -> None:
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text(
        "Host web-1\n    HostName 10.0.0.1\n\nHost web-2\n    HostName 10.0.0.2\n"
    )
    set_config(Config.from_ssh_config(ssh_config))

    with patch(
        "rollout_mcp.resources.hosts.check_hosts_online",
        new_callable=AsyncMock,
        return_value={"web-1": True, "web-2": False},
    ):
        text = await list_hosts_resource()

    assert "[✓] web-1 (online)" in text
    assert "[✗] web-2 (offline)" in text
    assert "SSH: root@10.0.0.1:22" in text
    assert "1/2 host(s) reachable" in text


@pytest.mark.asyncio
async def test_hosts_resource_without_hosts(tmp_path: Path) -> None:
    set_config(Config.from_ssh_config(tmp_path / "missing"))

    assert await list_hosts_resource() == "No SSH hosts configured."


@pytest.mark.asyncio
async def test_last_run_before_any_rollout() -> None:
    assert await last_run_resource() == "No rollout has run yet."


@pytest.mark.asyncio
async def test_last_run_summary() -> None:
    set_last_outcome(
        RunOutcome(
            batch_size=2,
            succeeded=("H2",),
            failed=("H1",),
            skipped=(),
            percent_succeeded=50,
            state=SchedulerState.EXHAUSTED,
            rounds=3,
            reasons={"H1": "install exited with code 1603"},
            export_path="/reports/failed_hosts_agent.msi_20260118-093012.csv",
        )
    )

    text = await last_run_resource()

    assert "Result:    exhausted after 3 round(s)" in text
    assert "H1: install exited with code 1603" in text
    assert "/reports/failed_hosts_agent.msi_20260118-093012.csv" in text
