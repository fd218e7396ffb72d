"""Retry scheduler: re-drives only the failed hosts, round after round.

State machine::

    RUNNING(working_set, remaining)
        -> SUCCEEDED   a round ends with no failures
        -> EXHAUSTED   remaining reaches 0 with failures left

Each round runs the host operation once for every host of a frozen working
set (bounded fan-out), records every outcome in the ledger, then drains the
ledger's failures to form the next working set. A host that succeeded is
never scheduled again, so a run performs at most
``len(batch) + sum(failures of rounds 1..R-1)`` operations.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

from rollout_mcp.models import ExecutionFailure, HostResult, SchedulerState, ScheduleResult

if TYPE_CHECKING:
    from rollout_mcp.models import ArtifactDescriptor, SSHHost
    from rollout_mcp.services.ledger import ResultLedger
    from rollout_mcp.services.operation import RemoteHostOperation

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


class RetryScheduler:
    """Drives rounds of the host operation until success or budget exhaustion."""

    def __init__(
        self,
        operation: "RemoteHostOperation",
        ledger: "ResultLedger",
        total_retries: int,
        retry_delay: float = 0,
        max_concurrency: int = 1,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialize the scheduler.

        Args:
            operation: Per-host stage/install/cleanup workflow
            ledger: Where outcomes are recorded
            total_retries: Maximum number of rounds, >= 1
            retry_delay: Seconds to wait between rounds, 0 for none
            max_concurrency: Hosts processed at once within a round
            sleep: Awaitable sleep, replaceable in tests

        Raises:
            ValueError: On a budget below 1, negative delay or concurrency below 1
        """
        if total_retries < 1:
            raise ValueError(f"total_retries must be >= 1, got {total_retries}")
        if retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {retry_delay}")
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")

        self.operation = operation
        self.ledger = ledger
        self.total_retries = total_retries
        self.retry_delay = retry_delay
        self.max_concurrency = max_concurrency
        self._sleep = sleep

        self.state = SchedulerState.RUNNING
        self.remaining_retries = total_retries
        self.operations = 0

    @property
    def current_round(self) -> int:
        """1-based number of the round being (or last) run."""
        return (self.total_retries - self.remaining_retries) + 1

    async def run(
        self, hosts: Sequence["SSHHost"], artifact: "ArtifactDescriptor"
    ) -> ScheduleResult:
        """Run rounds over ``hosts`` until a terminal state is reached."""
        by_name = {host.name: host for host in hosts}
        working_set: tuple[str, ...] = tuple(by_name)
        rounds = 0

        while self.state is SchedulerState.RUNNING:
            rounds += 1
            logger.info(
                "Starting round %d/%d on %d host(s)",
                self.current_round,
                self.total_retries,
                len(working_set),
            )
            await self._run_round([by_name[name] for name in working_set], artifact)

            errors = await self.ledger.drain_failures()
            if not errors:
                self.state = SchedulerState.SUCCEEDED
                logger.info("Round %d completed with no failures", self.current_round)
                break

            logger.warning(
                "Round %d finished with %d failure(s): %s",
                self.current_round,
                len(errors),
                ", ".join(errors),
            )
            self.remaining_retries -= 1
            working_set = errors

            if self.remaining_retries == 0:
                self.state = SchedulerState.EXHAUSTED
                self.ledger.restore_failures(errors)
                logger.error(
                    "Retry budget exhausted after %d round(s), %d host(s) still failing",
                    rounds,
                    len(errors),
                )
                break

            if self.retry_delay > 0:
                logger.info("Waiting %ss before round %d", self.retry_delay, self.current_round)
                await self._sleep(self.retry_delay)

        return ScheduleResult(
            state=self.state,
            rounds=rounds,
            remaining_retries=self.remaining_retries,
            operations=self.operations,
        )

    async def _run_round(
        self, hosts: Sequence["SSHHost"], artifact: "ArtifactDescriptor"
    ) -> None:
        """Run the operation on every host, at most ``max_concurrency`` at once."""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run_one(host: "SSHHost") -> None:
            async with semaphore:
                self.operations += 1
                result = await self._execute_isolated(host, artifact)
                await self.ledger.record(result)

        await asyncio.gather(*(run_one(host) for host in hosts))

    async def _execute_isolated(
        self, host: "SSHHost", artifact: "ArtifactDescriptor"
    ) -> HostResult:
        """Run one host; an unexpected error only fails that host."""
        try:
            return await self.operation.execute(host, artifact)
        except Exception as e:
            logger.exception("[%s] Unexpected error during install", host.name)
            return ExecutionFailure(host.name, message=str(e) or type(e).__name__)
