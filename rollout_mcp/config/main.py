"""Application configuration.

Delegates to specialized components:
- SSHConfigParser: Reads ~/.ssh/config
- Settings: Environment variables
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from rollout_mcp.config.parser import SSHConfigParser
from rollout_mcp.config.settings import Settings
from rollout_mcp.models import SSHHost

logger = logging.getLogger(__name__)


def _split_env_list(key: str) -> list[str] | None:
    """Comma separated env var to list, None when unset or blank."""
    value = os.getenv(key, "").strip()
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Config:
    """Application configuration.

    Aggregates settings from SSH config and environment.
    """

    settings: Settings
    parser: SSHConfigParser
    _hosts_cache: dict[str, SSHHost] | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment."""
        settings = Settings.from_env()
        parser = SSHConfigParser(
            config_path=os.getenv("ROLLOUT_SSH_CONFIG") or None,
            allowlist=_split_env_list("ROLLOUT_ALLOWLIST"),
            blocklist=_split_env_list("ROLLOUT_BLOCKLIST"),
        )
        logger.debug(
            "Config initialized: transport=%s, retries=%d, retry_delay=%ds, "
            "max_concurrency=%d, staging_root=%s",
            settings.transport,
            settings.retries,
            settings.retry_delay,
            settings.max_concurrency,
            settings.staging_root,
        )
        return cls(settings=settings, parser=parser)

    @classmethod
    def from_ssh_config(
        cls,
        ssh_config_path: Path | str | None = None,
        settings: Settings | None = None,
        allowlist: list[str] | None = None,
        blocklist: list[str] | None = None,
    ) -> "Config":
        """Create config for an explicit SSH config path."""
        parser = SSHConfigParser(
            config_path=ssh_config_path,
            allowlist=allowlist,
            blocklist=blocklist,
        )
        return cls(settings=settings or Settings(), parser=parser)

    def get_hosts(self) -> dict[str, SSHHost]:
        """Get SSH hosts from config.

        Lazy loads and caches hosts on first call.
        """
        if self._hosts_cache is None:
            self._hosts_cache = self.parser.parse()
        return self._hosts_cache

    def get_host(self, name: str) -> SSHHost | None:
        """Get host by alias, None if not in SSH config."""
        return self.get_hosts().get(name)

    def resolve_host(self, name: str) -> SSHHost:
        """Get host by alias, or an ad-hoc entry dialing ``name`` directly."""
        host = self.get_host(name)
        if host is not None:
            return host
        return SSHHost(name=name, hostname=name, user=self.settings.default_user)
