"""One rollout, end to end: validate, discover, schedule, report."""

import asyncio
import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from rollout_mcp.errors import EmptyBatchError
from rollout_mcp.models import ArtifactDescriptor, RunOutcome
from rollout_mcp.services.exporter import ReportExporter, render_summary
from rollout_mcp.services.ledger import ResultLedger
from rollout_mcp.services.operation import RemoteHostOperation
from rollout_mcp.services.scheduler import RetryScheduler, Sleeper
from rollout_mcp.utils.runlog import run_log
from rollout_mcp.utils.validation import validate_staging_root

if TYPE_CHECKING:
    from rollout_mcp.config import Settings
    from rollout_mcp.protocols import HostDiscovery, RemoteTransport

logger = logging.getLogger(__name__)


@dataclass
class RolloutRequest:
    """What to install where. Unset fields fall back to Settings."""

    artifact: str
    discovery: "HostDiscovery"
    install_args: str | Sequence[str] | None = None
    retries: int | None = None
    retry_delay: int | None = None
    staging_root: str | None = None


async def run_rollout(
    request: RolloutRequest,
    settings: "Settings",
    transport: "RemoteTransport",
    sleep: Sleeper = asyncio.sleep,
    now: datetime | None = None,
) -> RunOutcome:
    """Install one artifact on one batch of hosts, retrying failures.

    Args:
        request: Artifact, host source and per-run overrides
        settings: Defaults for anything the request leaves unset
        transport: Remote copy/invoke/delete implementation
        sleep: Inter-round sleep, replaceable in tests
        now: Clock override for log and export file names

    Returns:
        RunOutcome built after the scheduler reached a terminal state

    Raises:
        ArtifactNotFoundError: Artifact path is missing or unreadable
        HostListError: Host list file cannot be read
        EmptyBatchError: No usable hosts
        RunLogError: Run log cannot be created
        ValueError: Invalid staging root, retry budget or delay
    """
    raw_args = request.install_args if request.install_args is not None else settings.install_args
    artifact = ArtifactDescriptor.from_path(request.artifact, raw_args)
    staging_root = validate_staging_root(request.staging_root or settings.staging_root)
    retries = request.retries if request.retries is not None else settings.retries
    retry_delay = request.retry_delay if request.retry_delay is not None else settings.retry_delay

    batch = await request.discovery.discover()
    if not batch.hosts:
        raise EmptyBatchError(tuple(batch.skipped))

    ledger = ResultLedger()
    for host, reason in batch.skipped.items():
        ledger.mark_skipped([host], reason)

    operation = RemoteHostOperation(
        transport,
        staging_root=staging_root,
        copy_timeout=settings.copy_timeout,
        command_timeout=settings.command_timeout,
        cleanup_timeout=settings.cleanup_timeout,
    )
    scheduler = RetryScheduler(
        operation,
        ledger,
        total_retries=retries,
        retry_delay=retry_delay,
        max_concurrency=settings.max_concurrency,
        sleep=sleep,
    )
    exporter = ReportExporter(settings.export_dir, artifact.file_name)

    with run_log(settings.log_dir, artifact.file_name, now) as log_path:
        logger.info(
            "Starting rollout of %s to %d host(s) (retries=%d, delay=%ds, staging=%s, args=%s)",
            artifact.file_name,
            len(batch.hosts),
            retries,
            retry_delay,
            staging_root,
            " ".join(artifact.install_args) if artifact.install_args is not None else "default",
        )
        if batch.skipped:
            logger.warning("Skipped host(s): %s", ", ".join(batch.skipped))

        schedule = await scheduler.run(batch.hosts, artifact)
        outcome = exporter.export(ledger, batch.size, schedule, now)

        for line in render_summary(outcome).splitlines():
            logger.info(line)

    return dataclasses.replace(outcome, log_path=str(log_path))
