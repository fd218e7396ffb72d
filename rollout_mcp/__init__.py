"""Rollout MCP: install one artifact across a fleet of SSH hosts with bounded retry."""

__version__ = "0.1.0"
