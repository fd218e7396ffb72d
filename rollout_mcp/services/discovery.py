"""Host discovery: turns operator input into the batch for a run.

Three sources: an explicit list, SSH config aliases matching a pattern, and
a CSV file (first column, one host per row, the format the exporter writes
for failed hosts). Every source resolves names the same way; names that
cannot be used end up in ``HostBatch.skipped`` instead of the batch.
"""

import csv
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING

from rollout_mcp.errors import HostListError
from rollout_mcp.models import SSHHost
from rollout_mcp.utils.ping import check_hosts_online
from rollout_mcp.utils.validation import validate_host

if TYPE_CHECKING:
    from rollout_mcp.config import Config

logger = logging.getLogger(__name__)

# First-row values treated as a column header in imported host files
HEADER_NAMES = frozenset({"host", "hostname", "name", "computername"})


@dataclass(frozen=True)
class HostBatch:
    """Resolved hosts of a run plus the identifiers left out of it."""

    hosts: tuple[SSHHost, ...]
    skipped: dict[str, str] = field(default_factory=dict)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(host.name for host in self.hosts)

    @property
    def size(self) -> int:
        """Hosts submitted to the run, skipped ones included."""
        return len(self.hosts) + len(self.skipped)


class ResolvingDiscovery:
    """Shared resolution for all discovery sources."""

    def __init__(
        self,
        config: "Config",
        probe: bool = False,
        probe_timeout: float = 2.0,
    ) -> None:
        """Initialize discovery.

        Args:
            config: Config used to resolve aliases to SSH hosts
            probe: Skip hosts whose SSH port does not accept connections
            probe_timeout: Seconds per reachability probe
        """
        self.config = config
        self.probe = probe
        self.probe_timeout = probe_timeout

    def candidates(self) -> Iterable[str]:
        """Raw host identifiers, in order."""
        raise NotImplementedError

    async def discover(self) -> HostBatch:
        """Resolve candidates into a HostBatch."""
        hosts: dict[str, SSHHost] = {}
        skipped: dict[str, str] = {}

        for raw in self.candidates():
            try:
                name = validate_host(raw)
            except ValueError as e:
                logger.warning("Skipped host %r: %s", raw, e)
                skipped[raw.strip() or repr(raw)] = str(e)
                continue
            if name in hosts or name in skipped:
                logger.debug("Duplicate host %s ignored", name)
                continue
            hosts[name] = self.config.resolve_host(name)

        if self.probe and hosts:
            online = await check_hosts_online(
                {name: (host.hostname, host.port) for name, host in hosts.items()},
                timeout=self.probe_timeout,
            )
            for name, is_online in online.items():
                if not is_online:
                    logger.warning("Skipped host %s: unreachable", name)
                    skipped[name] = "unreachable"
                    del hosts[name]

        logger.info(
            "Discovered %d host(s), %d skipped",
            len(hosts),
            len(skipped),
        )
        return HostBatch(hosts=tuple(hosts.values()), skipped=skipped)


class StaticHostList(ResolvingDiscovery):
    """Hosts given explicitly by the caller."""

    def __init__(
        self,
        names: Iterable[str],
        config: "Config",
        probe: bool = False,
        probe_timeout: float = 2.0,
    ) -> None:
        super().__init__(config, probe=probe, probe_timeout=probe_timeout)
        self.names = list(names)

    def candidates(self) -> Iterable[str]:
        return self.names


class SSHConfigHosts(ResolvingDiscovery):
    """SSH config aliases matching a glob pattern."""

    def __init__(
        self,
        config: "Config",
        pattern: str = "*",
        probe: bool = False,
        probe_timeout: float = 2.0,
    ) -> None:
        super().__init__(config, probe=probe, probe_timeout=probe_timeout)
        self.pattern = pattern

    def candidates(self) -> Iterable[str]:
        return sorted(name for name in self.config.get_hosts() if fnmatch(name, self.pattern))


class HostFileImport(ResolvingDiscovery):
    """Hosts read from the first column of a CSV file."""

    def __init__(
        self,
        path: str | Path,
        config: "Config",
        probe: bool = False,
        probe_timeout: float = 2.0,
    ) -> None:
        super().__init__(config, probe=probe, probe_timeout=probe_timeout)
        self.path = Path(path).expanduser()

    def candidates(self) -> Iterable[str]:
        """Read the file; blank rows and a leading header row are ignored.

        Raises:
            HostListError: If the file cannot be read
        """
        try:
            with self.path.open(newline="", encoding="utf-8-sig") as handle:
                rows = [row for row in csv.reader(handle) if row and row[0].strip()]
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            raise HostListError(str(self.path), e) from e

        names = [row[0].strip() for row in rows]
        if names and names[0].lower() in HEADER_NAMES:
            names = names[1:]
        return names
