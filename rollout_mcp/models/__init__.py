"""Data models for Rollout MCP."""

from rollout_mcp.models.artifact import (
    ArtifactDescriptor,
    InstallerPackage,
    build_install_command,
    parse_install_args,
)
from rollout_mcp.models.command import CommandResult
from rollout_mcp.models.outcome import (
    ExecutionFailure,
    HostResult,
    InstallFailure,
    RunOutcome,
    SchedulerState,
    ScheduleResult,
    StagingFailure,
    Success,
)
from rollout_mcp.models.ssh import PooledConnection, SSHHost

__all__ = [
    "ArtifactDescriptor",
    "build_install_command",
    "CommandResult",
    "ExecutionFailure",
    "HostResult",
    "InstallerPackage",
    "InstallFailure",
    "parse_install_args",
    "PooledConnection",
    "RunOutcome",
    "SchedulerState",
    "ScheduleResult",
    "SSHHost",
    "StagingFailure",
    "Success",
]
