"""Tests for RetryScheduler."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from rollout_mcp.models import ArtifactDescriptor, SchedulerState, SSHHost, Success
from rollout_mcp.services.ledger import ResultLedger
from rollout_mcp.services.operation import RemoteHostOperation
from rollout_mcp.services.scheduler import RetryScheduler


def build(transport, retries: int, delay: float = 0, concurrency: int = 1, sleep=None):
    ledger = ResultLedger()
    operation = RemoteHostOperation(transport, staging_root="/tmp/rollout")
    scheduler = RetryScheduler(
        operation,
        ledger,
        total_retries=retries,
        retry_delay=delay,
        max_concurrency=concurrency,
        sleep=sleep or AsyncMock(),
    )
    return scheduler, ledger


@pytest.mark.asyncio
async def test_all_succeed_in_first_round(
    fake_transport, artifact: ArtifactDescriptor, hosts_factory
) -> None:
    transport = fake_transport()
    scheduler, ledger = build(transport, retries=3)

    result = await scheduler.run(hosts_factory("h1", "h2", "h3"), artifact)

    assert result.state is SchedulerState.SUCCEEDED
    assert result.rounds == 1
    assert result.remaining_retries == 3
    assert result.operations == 3
    assert ledger.succeeded == ("h1", "h2", "h3")
    assert ledger.failed == ()


@pytest.mark.asyncio
async def test_staging_failure_retried_next_round(
    fake_transport, artifact: ArtifactDescriptor, hosts_factory
) -> None:
    """H2 fails staging in round 1 and succeeds in round 2."""
    transport = fake_transport({"H2": ["stage"]})
    scheduler, ledger = build(transport, retries=3)

    result = await scheduler.run(hosts_factory("H1", "H2", "H3"), artifact)

    assert result.state is SchedulerState.SUCCEEDED
    assert result.rounds == 2
    assert set(ledger.succeeded) == {"H1", "H2", "H3"}
    assert ledger.failed == ()
    assert len(transport.invokes) == 3
    assert [host for host, _, _ in transport.copies] == ["H1", "H2", "H3", "H2"]


@pytest.mark.asyncio
async def test_single_round_budget_exhausts_immediately(
    fake_transport, artifact: ArtifactDescriptor, hosts_factory
) -> None:
    transport = fake_transport({"H1": ["exit:1603"]})
    scheduler, ledger = build(transport, retries=1)

    result = await scheduler.run(hosts_factory("H1"), artifact)

    assert result.state is SchedulerState.EXHAUSTED
    assert result.rounds == 1
    assert result.remaining_retries == 0
    assert ledger.failed == ("H1",)
    assert ledger.reasons["H1"] == "install exited with code 1603"


@pytest.mark.asyncio
async def test_never_more_rounds_than_budget(
    fake_transport, artifact: ArtifactDescriptor, hosts_factory
) -> None:
    """A host that always fails is tried exactly `retries` times."""
    transport = fake_transport({"bad": ["exit:1"] * 10})
    scheduler, ledger = build(transport, retries=4)

    result = await scheduler.run(hosts_factory("good", "bad"), artifact)

    assert result.state is SchedulerState.EXHAUSTED
    assert result.rounds == 4
    assert transport.invoked_hosts().count("bad") == 4
    assert ledger.succeeded == ("good",)
    assert ledger.failed == ("bad",)


@pytest.mark.asyncio
async def test_succeeded_hosts_never_rerun(
    fake_transport, artifact: ArtifactDescriptor, hosts_factory
) -> None:
    transport = fake_transport({"h2": ["exit:1", "exit:1"], "h3": ["channel"]})
    scheduler, _ = build(transport, retries=5)

    result = await scheduler.run(hosts_factory("h1", "h2", "h3"), artifact)

    invoked = transport.invoked_hosts()
    assert invoked.count("h1") == 1
    assert invoked.count("h3") == 2
    assert invoked.count("h2") == 3
    # batch + failures of each round: 3 + 2 + 1
    assert result.operations == 6


@pytest.mark.asyncio
async def test_outcome_sets_cover_batch_exactly_once(
    fake_transport, artifact: ArtifactDescriptor, hosts_factory
) -> None:
    names = [f"h{i}" for i in range(12)]
    script = {name: ["exit:2"] * (i % 4) for i, name in enumerate(names)}
    transport = fake_transport(script)
    scheduler, ledger = build(transport, retries=3, concurrency=4)

    await scheduler.run(hosts_factory(*names), artifact)

    combined = list(ledger.succeeded) + list(ledger.failed) + list(ledger.skipped)
    assert sorted(combined) == sorted(names)
    assert len(combined) == len(set(combined))
    assert set(ledger.failed) == {"h3", "h7", "h11"}


@pytest.mark.asyncio
async def test_zero_delay_never_sleeps(
    fake_transport, artifact: ArtifactDescriptor, hosts_factory
) -> None:
    sleep = AsyncMock()
    transport = fake_transport({"h1": ["exit:1", "exit:1"]})
    scheduler, _ = build(transport, retries=3, delay=0, sleep=sleep)

    await scheduler.run(hosts_factory("h1"), artifact)

    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_delay_between_rounds_only(
    fake_transport, artifact: ArtifactDescriptor, hosts_factory
) -> None:
    """Sleeps before each retry round, never after the last round."""
    sleep = AsyncMock()
    transport = fake_transport({"h1": ["exit:1"] * 3})
    scheduler, _ = build(transport, retries=3, delay=30, sleep=sleep)

    result = await scheduler.run(hosts_factory("h1"), artifact)

    assert result.state is SchedulerState.EXHAUSTED
    assert sleep.await_count == 2
    sleep.assert_awaited_with(30)


def test_current_round_numbering(fake_transport) -> None:
    scheduler, _ = build(fake_transport(), retries=3)

    assert scheduler.current_round == 1
    scheduler.remaining_retries = 1
    assert scheduler.current_round == 3


@pytest.mark.parametrize(
    "kwargs",
    [
        {"total_retries": 0},
        {"total_retries": 1, "retry_delay": -1},
        {"total_retries": 1, "max_concurrency": 0},
    ],
)
def test_rejects_invalid_parameters(fake_transport, kwargs) -> None:
    operation = RemoteHostOperation(fake_transport(), staging_root="/tmp/rollout")

    with pytest.raises(ValueError):
        RetryScheduler(operation, ResultLedger(), **kwargs)


@pytest.mark.asyncio
async def test_unexpected_error_only_fails_that_host(
    artifact: ArtifactDescriptor, hosts_factory
) -> None:
    """One host's crash does not abort the round for the others."""

    class CrashingOperation:
        async def execute(self, host: SSHHost, artifact):
            if host.name == "h2":
                raise RuntimeError("boom")
            return Success(host.name)

    ledger = ResultLedger()
    scheduler = RetryScheduler(CrashingOperation(), ledger, total_retries=1)

    result = await scheduler.run(hosts_factory("h1", "h2", "h3"), artifact)

    assert result.state is SchedulerState.EXHAUSTED
    assert ledger.succeeded == ("h1", "h3")
    assert ledger.failed == ("h2",)
    assert ledger.reasons["h2"] == "execution failed: boom"


@pytest.mark.asyncio
async def test_concurrency_is_bounded(artifact: ArtifactDescriptor, hosts_factory) -> None:
    in_flight = 0
    peak = 0

    class SlowOperation:
        async def execute(self, host: SSHHost, artifact):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return Success(host.name)

    scheduler = RetryScheduler(
        SlowOperation(), ResultLedger(), total_retries=1, max_concurrency=3
    )

    await scheduler.run(hosts_factory(*(f"h{i}" for i in range(10))), artifact)

    assert peak == 3
