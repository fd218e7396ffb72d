"""End-to-end rollout tests over a scripted transport."""

import asyncio
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from rollout_mcp.config import Config, Settings
from rollout_mcp.errors import ArtifactNotFoundError, EmptyBatchError, RunLogError
from rollout_mcp.models import SchedulerState
from rollout_mcp.services.deployment import RolloutRequest, run_rollout
from rollout_mcp.services.discovery import StaticHostList

NOW = datetime(2026, 1, 18, 9, 30, 12)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        retries=3,
        export_dir=str(tmp_path / "reports"),
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def config(tmp_path: Path, settings: Settings) -> Config:
    return Config.from_ssh_config(tmp_path / "missing_ssh_config", settings=settings)


def request_for(artifact_path: Path, config: Config, *hosts: str, **overrides) -> RolloutRequest:
    return RolloutRequest(
        artifact=str(artifact_path),
        discovery=StaticHostList(hosts, config),
        **overrides,
    )


@pytest.mark.asyncio
async def test_successful_rollout_exports_nothing(
    fake_transport, artifact_path: Path, config: Config, settings: Settings, tmp_path: Path
) -> None:
    transport = fake_transport()

    outcome = await run_rollout(
        request_for(artifact_path, config, "H1", "H2"),
        settings,
        transport,
        sleep=AsyncMock(),
        now=NOW,
    )

    assert outcome.state is SchedulerState.SUCCEEDED
    assert outcome.succeeded == ("H1", "H2")
    assert outcome.percent_succeeded == 100
    assert outcome.export_path is None
    assert not (tmp_path / "reports").exists()
    assert outcome.log_path == str(tmp_path / "logs" / "rollout_agent.msi_20260118-093012.log")
    assert ("H1", "msiexec", ("/i", "/tmp/rollout/agent/agent.msi", "/qn", "/norestart")) in (
        transport.invokes
    )


@pytest.mark.asyncio
async def test_exhausted_rollout_exports_failed_hosts(
    fake_transport, artifact_path: Path, config: Config, settings: Settings
) -> None:
    transport = fake_transport({"H1": ["exit:1603"]})

    outcome = await run_rollout(
        request_for(artifact_path, config, "H1", "H2", retries=1),
        settings,
        transport,
        sleep=AsyncMock(),
        now=NOW,
    )

    assert outcome.state is SchedulerState.EXHAUSTED
    assert outcome.failed == ("H1",)
    assert outcome.succeeded == ("H2",)
    assert outcome.percent_succeeded == 50
    assert outcome.reasons == {"H1": "install exited with code 1603"}
    assert outcome.export_path is not None
    assert Path(outcome.export_path).read_text() == "H1\n"
    assert Path(outcome.export_path).name == "failed_hosts_agent.msi_20260118-093012.csv"


@pytest.mark.asyncio
async def test_run_log_holds_round_narration_and_summary(
    fake_transport, artifact_path: Path, config: Config, settings: Settings
) -> None:
    transport = fake_transport({"H1": ["stage"]})

    outcome = await run_rollout(
        request_for(artifact_path, config, "H1"),
        settings,
        transport,
        sleep=AsyncMock(),
        now=NOW,
    )

    log_text = Path(outcome.log_path).read_text()
    assert "Starting rollout of agent.msi to 1 host(s)" in log_text
    assert "Rollout Summary" in log_text
    assert "Success:   100% (1/1 hosts)" in log_text


@pytest.mark.asyncio
async def test_skipped_hosts_count_toward_batch(
    fake_transport, artifact_path: Path, config: Config, settings: Settings
) -> None:
    outcome = await run_rollout(
        request_for(artifact_path, config, "H1", "bad;host"),
        settings,
        fake_transport(),
        sleep=AsyncMock(),
        now=NOW,
    )

    assert outcome.batch_size == 2
    assert outcome.skipped == ("bad;host",)
    assert outcome.percent_succeeded == 50
    assert outcome.export_path is None


@pytest.mark.asyncio
async def test_retry_delay_between_rounds(
    fake_transport, artifact_path: Path, config: Config, settings: Settings
) -> None:
    sleep = AsyncMock()

    await run_rollout(
        request_for(artifact_path, config, "H1", retry_delay=5),
        settings,
        fake_transport({"H1": ["channel", "ok"]}),
        sleep=sleep,
        now=NOW,
    )

    sleep.assert_awaited_once_with(5)


@pytest.mark.asyncio
async def test_install_args_override(
    fake_transport, artifact_path: Path, config: Config, settings: Settings
) -> None:
    transport = fake_transport()

    await run_rollout(
        request_for(artifact_path, config, "H1", install_args="/quiet"),
        settings,
        transport,
        sleep=AsyncMock(),
        now=NOW,
    )

    assert transport.invokes == [
        ("H1", "msiexec", ("/i", "/tmp/rollout/agent/agent.msi", "/quiet"))
    ]


@pytest.mark.asyncio
async def test_missing_artifact_raises_before_any_remote_work(
    fake_transport, config: Config, settings: Settings, tmp_path: Path
) -> None:
    transport = fake_transport()

    with pytest.raises(ArtifactNotFoundError):
        await run_rollout(
            request_for(tmp_path / "nope.msi", config, "H1"),
            settings,
            transport,
            sleep=AsyncMock(),
        )

    assert transport.copies == []


@pytest.mark.asyncio
async def test_empty_batch_raises(
    fake_transport, artifact_path: Path, config: Config, settings: Settings
) -> None:
    with pytest.raises(EmptyBatchError):
        await run_rollout(
            request_for(artifact_path, config, "bad;host"),
            settings,
            fake_transport(),
            sleep=AsyncMock(),
        )


@pytest.mark.asyncio
async def test_invalid_staging_root_raises(
    fake_transport, artifact_path: Path, config: Config, settings: Settings
) -> None:
    with pytest.raises(ValueError):
        await run_rollout(
            request_for(artifact_path, config, "H1", staging_root="relative/dir"),
            settings,
            fake_transport(),
            sleep=AsyncMock(),
        )


@pytest.mark.asyncio
async def test_unwritable_log_dir_raises(
    fake_transport, artifact_path: Path, config: Config, settings: Settings, tmp_path: Path
) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    settings.log_dir = str(blocker)
    transport = fake_transport()

    with pytest.raises(RunLogError):
        await run_rollout(
            request_for(artifact_path, config, "H1"),
            settings,
            transport,
            sleep=AsyncMock(),
        )

    assert transport.copies == []


@pytest.mark.asyncio
async def test_concurrent_rollouts_keep_separate_run_logs(
    fake_transport, artifact_path: Path, config: Config, settings: Settings
) -> None:
    first, second = await asyncio.gather(
        run_rollout(
            request_for(artifact_path, config, "alpha1", "alpha2"),
            settings,
            fake_transport({"alpha2": ["exit:5"]}),
            sleep=AsyncMock(),
            now=NOW,
        ),
        run_rollout(
            request_for(artifact_path, config, "beta1", "beta2"),
            settings,
            fake_transport({"beta1": ["stage"]}),
            sleep=AsyncMock(),
            now=NOW,
        ),
    )

    assert first.log_path != second.log_path
    first_log = Path(first.log_path).read_text()
    second_log = Path(second.log_path).read_text()
    assert "alpha1" in first_log and "alpha2" in first_log
    assert "beta1" not in first_log and "beta2" not in first_log
    assert "beta1" in second_log and "beta2" in second_log
    assert "alpha1" not in second_log and "alpha2" not in second_log
