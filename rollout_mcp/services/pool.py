"""SSH connection pool shared by all hosts of a rollout.

Locking:
- ``_meta_lock`` guards the OrderedDict and the per-host lock table.
- A per-host lock serializes connect/remove for one host, so concurrent
  operations on different hosts never wait on each other's handshakes.

Eviction is LRU once ``max_size`` connections are open; idle connections
are closed by a background task.
"""

import asyncio
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import asyncssh

from rollout_mcp.models import PooledConnection

if TYPE_CHECKING:
    from rollout_mcp.models import SSHHost

logger = logging.getLogger(__name__)


class ConnectionPool:
    """SSH connection pool with size limit, LRU eviction and idle cleanup."""

    def __init__(
        self,
        idle_timeout: int = 60,
        max_size: int = 100,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
        connect_timeout: float = 30.0,
    ) -> None:
        """Initialize pool.

        Args:
            idle_timeout: Seconds before idle connections are closed
            max_size: Maximum number of open SSH connections (must be > 0)
            known_hosts: Path to known_hosts file, or None to disable verification
            strict_host_key_checking: Whether to reject unknown host keys
            connect_timeout: Seconds allowed for the SSH handshake

        Raises:
            ValueError: If max_size is not positive
        """
        if max_size <= 0:
            raise ValueError(f"max_size must be > 0, got {max_size}")

        self.idle_timeout = idle_timeout
        self.max_size = max_size
        self.connect_timeout = connect_timeout
        self._known_hosts = known_hosts
        self._strict_host_key = strict_host_key_checking
        self._connections: OrderedDict[str, PooledConnection] = OrderedDict()
        self._host_locks: dict[str, asyncio.Lock] = {}
        self._meta_lock = asyncio.Lock()
        self._cleanup_task: asyncio.Task[Any] | None = None

        if known_hosts is None:
            logger.warning(
                "SSH host key verification DISABLED. "
                "Set ROLLOUT_KNOWN_HOSTS to a known_hosts file to enable it."
            )

        logger.debug(
            "ConnectionPool initialized (idle_timeout=%ds, max_size=%d)",
            idle_timeout,
            max_size,
        )

    async def _get_host_lock(self, host_name: str) -> asyncio.Lock:
        async with self._meta_lock:
            return self._host_locks.setdefault(host_name, asyncio.Lock())

    async def _evict_lru_if_needed(self) -> None:
        """Close least recently used connections until there is room."""
        evicted: list[PooledConnection] = []

        async with self._meta_lock:
            while len(self._connections) >= self.max_size:
                oldest, pooled = self._connections.popitem(last=False)
                logger.info(
                    "Pool at capacity (%d), evicting LRU connection to %s",
                    self.max_size,
                    oldest,
                )
                evicted.append(pooled)

        for pooled in evicted:
            pooled.connection.close()

    async def _connect(self, host: "SSHHost") -> asyncssh.SSHClientConnection:
        """Open a new SSH connection, honouring the host key policy."""
        client_keys = [host.identity_file] if host.identity_file else None
        options: dict[str, Any] = {
            "port": host.port,
            "username": host.user,
            "client_keys": client_keys,
            "connect_timeout": self.connect_timeout,
        }

        try:
            return await asyncssh.connect(
                host.hostname, known_hosts=self._known_hosts, **options
            )
        except asyncssh.HostKeyNotVerifiable as e:
            if self._strict_host_key:
                logger.error(
                    "Host key verification failed for %s: %s. Add the key to %s "
                    "or set ROLLOUT_STRICT_HOST_KEY_CHECKING=false",
                    host.name,
                    e,
                    self._known_hosts,
                )
                raise
            logger.warning(
                "Host key not verified for %s (strict mode disabled): %s",
                host.name,
                e,
            )
            return await asyncssh.connect(host.hostname, known_hosts=None, **options)

    async def get_connection(self, host: "SSHHost") -> asyncssh.SSHClientConnection:
        """Get a pooled connection to the host, opening one if needed."""
        host_lock = await self._get_host_lock(host.name)

        async with host_lock:
            pooled = self._connections.get(host.name)
            if pooled and not pooled.is_stale:
                pooled.touch()
                async with self._meta_lock:
                    self._connections.move_to_end(host.name)
                logger.debug("Reusing connection to %s", host.name)
                return pooled.connection

            if pooled:
                logger.info("Connection to %s is stale, reconnecting", host.name)

            await self._evict_lru_if_needed()

            logger.info("Opening SSH connection to %s (%s)", host.name, host.address)
            conn = await self._connect(host)

            async with self._meta_lock:
                self._connections[host.name] = PooledConnection(connection=conn)
                self._connections.move_to_end(host.name)

            logger.debug(
                "SSH connection established to %s (pool_size=%d/%d)",
                host.name,
                len(self._connections),
                self.max_size,
            )

            if self._cleanup_task is None or self._cleanup_task.done():
                self._cleanup_task = asyncio.create_task(self._cleanup_loop())

            return conn

    async def _cleanup_loop(self) -> None:
        """Periodically close idle connections until the pool is empty."""
        interval = max(self.idle_timeout // 2, 1)
        while True:
            await asyncio.sleep(interval)
            await self._cleanup_idle()
            if not self._connections:
                break

    async def _cleanup_idle(self) -> None:
        """Close connections that have been idle too long or were closed."""
        async with self._meta_lock:
            host_names = list(self._connections)

        cutoff = datetime.now() - timedelta(seconds=self.idle_timeout)

        for host_name in host_names:
            host_lock = await self._get_host_lock(host_name)
            async with host_lock:
                pooled = self._connections.get(host_name)
                if pooled and (pooled.last_used < cutoff or pooled.is_stale):
                    logger.debug("Closing idle connection to %s", host_name)
                    pooled.connection.close()
                    async with self._meta_lock:
                        self._connections.pop(host_name, None)

    async def remove_connection(self, host_name: str) -> None:
        """Close and forget the connection to one host, if any."""
        host_lock = await self._get_host_lock(host_name)
        async with host_lock:
            async with self._meta_lock:
                pooled = self._connections.pop(host_name, None)
            if pooled is not None:
                logger.info("Removing connection to %s", host_name)
                pooled.connection.close()

    async def close_all(self) -> None:
        """Close all connections and stop the cleanup task."""
        async with self._meta_lock:
            host_names = list(self._connections)

        if host_names:
            logger.info("Closing %d connection(s)", len(host_names))
        for host_name in host_names:
            await self.remove_connection(host_name)

        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()

    @property
    def pool_size(self) -> int:
        """Number of open connections."""
        return len(self._connections)

    @property
    def active_hosts(self) -> list[str]:
        """Hosts with an open connection, least recently used first."""
        return list(self._connections)
