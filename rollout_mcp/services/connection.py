"""SSH connection helper with one retry."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncssh

    from rollout_mcp.models import SSHHost
    from rollout_mcp.protocols import SSHConnectionPool

logger = logging.getLogger(__name__)


class ConnectionError(Exception):
    """Failed to establish SSH connection after retry."""

    def __init__(self, host_name: str, original_error: Exception):
        """Initialize connection error.

        Args:
            host_name: Name of the SSH host
            original_error: Exception raised by the retry attempt
        """
        self.host_name = host_name
        self.original_error = original_error
        super().__init__(f"Cannot connect to {host_name}: {original_error}")


async def get_connection_with_retry(
    pool: "SSHConnectionPool",
    ssh_host: "SSHHost",
) -> "asyncssh.SSHClientConnection":
    """Get an SSH connection, dropping a possibly stale one and retrying once.

    Raises:
        ConnectionError: If the retry fails too
    """
    try:
        return await pool.get_connection(ssh_host)
    except Exception as first_error:
        logger.warning(
            "Connection to %s failed: %s, retrying after cleanup",
            ssh_host.name,
            first_error,
        )
        try:
            await pool.remove_connection(ssh_host.name)
            return await pool.get_connection(ssh_host)
        except Exception as retry_error:
            logger.error("Retry connection to %s failed: %s", ssh_host.name, retry_error)
            raise ConnectionError(ssh_host.name, retry_error) from retry_error
