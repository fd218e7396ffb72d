"""Configuration module for Rollout MCP.

- Config: Main configuration class (aggregates all components)
- SSHConfigParser: Parses ~/.ssh/config files
- Settings: Environment variable configuration
"""

from rollout_mcp.config.main import Config
from rollout_mcp.config.parser import SSHConfigParser
from rollout_mcp.config.settings import Settings

__all__ = ["Config", "SSHConfigParser", "Settings"]
