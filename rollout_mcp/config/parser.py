"""SSH config file parser.

Reads ~/.ssh/config and turns Host blocks into SSHHost entries, filtered by
allowlist/blocklist. These are the hosts a rollout can address by alias.
"""

import logging
import os
import re
from pathlib import Path

from rollout_mcp.models import SSHHost

logger = logging.getLogger(__name__)

_HOST_RE = re.compile(r"^Host\s+(\S+)", re.IGNORECASE)
_KV_RE = re.compile(r"^(\w+)\s+(.+)$")


class SSHConfigParser:
    """Parser for SSH config files.

    Supports HostName, User, Port and IdentityFile; values from a wildcard
    ``Host *`` block act as defaults for the blocks that follow it.
    """

    def __init__(
        self,
        config_path: Path | str | None = None,
        allowlist: list[str] | None = None,
        blocklist: list[str] | None = None,
    ):
        """Initialize SSH config parser.

        Args:
            config_path: Path to SSH config file (default: ~/.ssh/config)
            allowlist: Only include these hosts (if set)
            blocklist: Exclude these hosts
        """
        if config_path is None:
            config_path = Path.home() / ".ssh" / "config"

        self.config_path = Path(config_path)
        self.allowlist = set(allowlist) if allowlist else None
        self.blocklist = set(blocklist) if blocklist else set()

    def parse(self) -> dict[str, SSHHost]:
        """Parse SSH config and return host definitions keyed by alias."""
        if not self.config_path.exists():
            logger.warning("SSH config not found: %s", self.config_path)
            return {}

        try:
            content = self.config_path.read_text()
        except OSError as e:
            logger.warning("Cannot read SSH config %s: %s", self.config_path, e)
            return {}

        hosts: dict[str, SSHHost] = {}
        current: str | None = None
        data: dict[str, str] = {}
        defaults: dict[str, str] = {}

        for raw in content.splitlines():
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            host_match = _HOST_RE.match(line)
            if host_match:
                self._add_host(hosts, current, data)
                current = host_match.group(1)
                if "*" in current or "?" in current:
                    current = "*"
                data = {} if current == "*" else defaults.copy()
                continue

            kv_match = _KV_RE.match(line)
            if kv_match and current:
                key = kv_match.group(1).lower()
                value = kv_match.group(2).strip()
                if key == "identityfile":
                    value = os.path.expanduser(value)
                data[key] = value
                if current == "*":
                    defaults[key] = value

        self._add_host(hosts, current, data)

        logger.info("Parsed %d hosts from %s", len(hosts), self.config_path)
        return hosts

    def _add_host(
        self,
        hosts: dict[str, SSHHost],
        name: str | None,
        data: dict[str, str],
    ) -> None:
        """Store a finished Host block if it is complete and allowed."""
        if not name or name == "*" or not data.get("hostname"):
            return
        if not self._is_host_allowed(name):
            logger.debug("Host %s filtered by allowlist/blocklist", name)
            return

        try:
            port = int(data.get("port", "22"))
        except ValueError:
            logger.warning("Invalid port for %s: %s, using 22", name, data.get("port"))
            port = 22

        hosts[name] = SSHHost(
            name=name,
            hostname=data["hostname"],
            user=data.get("user", "root"),
            port=port,
            identity_file=data.get("identityfile"),
        )

    def _is_host_allowed(self, name: str) -> bool:
        """Check if host passes allowlist/blocklist filters.

        Allowlist takes precedence over blocklist.
        """
        if self.allowlist:
            return name in self.allowlist
        return name not in self.blocklist
