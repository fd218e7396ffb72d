"""Middleware for Rollout MCP."""

from rollout_mcp.middleware.errors import ErrorHandlingMiddleware

__all__ = ["ErrorHandlingMiddleware"]
