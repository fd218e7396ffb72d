"""MCP tools for Rollout MCP."""

from rollout_mcp.tools.rollout import rollout

__all__ = ["rollout"]
