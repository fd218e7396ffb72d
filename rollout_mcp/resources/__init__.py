"""MCP resources for Rollout MCP."""

from rollout_mcp.resources.hosts import list_hosts_resource
from rollout_mcp.resources.runs import last_run_resource

__all__ = ["last_run_resource", "list_hosts_resource"]
