"""Final run report: outcome aggregate, failure export and summary text."""

import csv
import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import TYPE_CHECKING

from rollout_mcp.models import RunOutcome, SchedulerState
from rollout_mcp.utils.runlog import safe_name, timestamp, unique_path

if TYPE_CHECKING:
    from rollout_mcp.models import ScheduleResult
    from rollout_mcp.services.ledger import ResultLedger

logger = logging.getLogger(__name__)


def percent_succeeded(succeeded: int, batch_size: int) -> int:
    """Whole-number success percentage, halves rounded away from zero.

    Raises:
        ValueError: If batch_size is not positive
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be > 0, got {batch_size}")
    ratio = Decimal(succeeded * 100) / Decimal(batch_size)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class ReportExporter:
    """Builds the RunOutcome and writes the resubmittable failure file."""

    def __init__(self, export_dir: str | Path, artifact_name: str = "artifact") -> None:
        """Initialize the exporter.

        Args:
            export_dir: Directory receiving failure files (created on demand)
            artifact_name: Artifact file name, used in the export file name
        """
        self.export_dir = Path(export_dir)
        self.artifact_name = artifact_name

    def export(
        self,
        ledger: "ResultLedger",
        batch_size: int,
        schedule: "ScheduleResult",
        now: datetime | None = None,
    ) -> RunOutcome:
        """Snapshot the ledger into a RunOutcome, exporting failures if any.

        Args:
            ledger: Ledger after the scheduler reached a terminal state
            batch_size: Number of hosts in the batch (skipped hosts included)
            schedule: Terminal scheduler result
            now: Clock override for the export file name

        Raises:
            ValueError: If batch_size is not positive
            OSError: If the failure file cannot be written
        """
        succeeded = ledger.succeeded
        failed = ledger.failed
        skipped = ledger.skipped
        reasons = ledger.reasons

        export_path: str | None = None
        if failed:
            export_path = str(self.write_failures(failed, now))

        return RunOutcome(
            batch_size=batch_size,
            succeeded=succeeded,
            failed=failed,
            skipped=skipped,
            percent_succeeded=percent_succeeded(len(succeeded), batch_size),
            state=schedule.state,
            rounds=schedule.rounds,
            reasons={host: reasons[host] for host in (*failed, *skipped) if host in reasons},
            export_path=export_path,
        )

    def write_failures(self, hosts: tuple[str, ...], now: datetime | None = None) -> Path:
        """Write one host identifier per row, no header."""
        self.export_dir.mkdir(parents=True, exist_ok=True)
        path = unique_path(
            self.export_dir
            / f"failed_hosts_{safe_name(self.artifact_name)}_{timestamp(now)}.csv"
        )
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle, lineterminator="\n")
            for host in hosts:
                writer.writerow([host])

        logger.info("Exported %d failed host(s) to %s", len(hosts), path)
        return path


def render_summary(outcome: RunOutcome) -> str:
    """Human-readable summary block for logs and tool replies."""

    def host_list(hosts: tuple[str, ...]) -> str:
        return ", ".join(hosts) if hosts else "(none)"

    lines = [
        "Rollout Summary",
        "=" * 40,
        f"Result:    {outcome.state.value} after {outcome.rounds} round(s)",
        f"Success:   {outcome.percent_succeeded}% "
        f"({len(outcome.succeeded)}/{outcome.batch_size} hosts)",
        f"Succeeded: {host_list(outcome.succeeded)}",
        f"Errors:    {host_list(outcome.failed)}",
        f"Skipped:   {host_list(outcome.skipped)}",
    ]

    if outcome.reasons:
        lines.append("")
        lines.append("Reasons:")
        for host, reason in outcome.reasons.items():
            lines.append(f"  {host}: {reason}")

    if outcome.state is SchedulerState.EXHAUSTED and outcome.export_path:
        lines.append("")
        lines.append(f"Failed hosts exported to {outcome.export_path}")
        lines.append("Resubmit the same rollout with that file as the host list to retry them.")

    return "\n".join(lines)
