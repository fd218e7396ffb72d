"""Services for Rollout MCP."""

from rollout_mcp.services.connection import ConnectionError, get_connection_with_retry
from rollout_mcp.services.deployment import RolloutRequest, run_rollout
from rollout_mcp.services.discovery import (
    HostBatch,
    HostFileImport,
    SSHConfigHosts,
    StaticHostList,
)
from rollout_mcp.services.exporter import ReportExporter, percent_succeeded, render_summary
from rollout_mcp.services.ledger import ResultLedger
from rollout_mcp.services.operation import RemoteHostOperation
from rollout_mcp.services.pool import ConnectionPool
from rollout_mcp.services.scheduler import RetryScheduler
from rollout_mcp.services.state import (
    get_config,
    get_last_outcome,
    get_pool,
    reset_state,
    set_config,
    set_last_outcome,
    set_pool,
)
from rollout_mcp.services.transport import SSHTransport

__all__ = [
    "ConnectionError",
    "ConnectionPool",
    "get_config",
    "get_connection_with_retry",
    "get_last_outcome",
    "get_pool",
    "HostBatch",
    "HostFileImport",
    "percent_succeeded",
    "RemoteHostOperation",
    "render_summary",
    "ReportExporter",
    "reset_state",
    "ResultLedger",
    "RetryScheduler",
    "RolloutRequest",
    "run_rollout",
    "set_config",
    "set_last_outcome",
    "set_pool",
    "SSHConfigHosts",
    "SSHTransport",
    "StaticHostList",
]
