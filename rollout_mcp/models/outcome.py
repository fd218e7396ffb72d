"""Per-host and per-run outcome models."""

from dataclasses import dataclass, field
from enum import Enum


class SchedulerState(Enum):
    """Retry scheduler state."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class HostResult:
    """Outcome of one install attempt on one host."""

    host: str
    cleanup_error: str | None = field(default=None, kw_only=True)

    @property
    def success(self) -> bool:
        """True only for Success."""
        return False

    def describe(self) -> str:
        """One-line reason for reports."""
        return "ok"


@dataclass(frozen=True)
class Success(HostResult):
    """Installer exited with code 0."""

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class StagingFailure(HostResult):
    """Artifact folder could not be copied to the host."""

    reason: str = ""

    def describe(self) -> str:
        return f"staging failed: {self.reason}"


@dataclass(frozen=True)
class InstallFailure(HostResult):
    """Installer ran and exited nonzero."""

    code: int = -1

    def describe(self) -> str:
        return f"install exited with code {self.code}"


@dataclass(frozen=True)
class ExecutionFailure(HostResult):
    """Remote execution channel faulted before an exit code came back."""

    message: str = ""

    def describe(self) -> str:
        return f"execution failed: {self.message}"


@dataclass(frozen=True)
class ScheduleResult:
    """Terminal state of a retry scheduler run."""

    state: SchedulerState
    rounds: int
    remaining_retries: int
    operations: int


@dataclass(frozen=True)
class RunOutcome:
    """Final aggregate of a rollout, built once after scheduling ends."""

    batch_size: int
    succeeded: tuple[str, ...]
    failed: tuple[str, ...]
    skipped: tuple[str, ...]
    percent_succeeded: int
    state: SchedulerState
    rounds: int
    reasons: dict[str, str] = field(default_factory=dict)
    export_path: str | None = None
    log_path: str | None = None

    @property
    def complete(self) -> bool:
        """True when every scheduled host succeeded."""
        return not self.failed
