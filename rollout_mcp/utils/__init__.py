"""Utilities for Rollout MCP."""

from rollout_mcp.utils.console import ColorfulFormatter, RequestFormatter, RunLogFormatter
from rollout_mcp.utils.ping import check_host_online, check_hosts_online
from rollout_mcp.utils.runlog import run_log, safe_name, timestamp
from rollout_mcp.utils.shell import command_line, is_windows_command, quote_path
from rollout_mcp.utils.validation import validate_host, validate_staging_root

__all__ = [
    "check_host_online",
    "check_hosts_online",
    "ColorfulFormatter",
    "command_line",
    "is_windows_command",
    "quote_path",
    "RequestFormatter",
    "run_log",
    "RunLogFormatter",
    "safe_name",
    "timestamp",
    "validate_host",
    "validate_staging_root",
]
