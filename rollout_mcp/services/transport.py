"""asyncssh implementation of the remote capabilities a rollout needs.

Staging and cleanup go over SFTP so they do not depend on the remote shell;
the install command runs through ``conn.run``.
"""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import asyncssh

from rollout_mcp.models import CommandResult
from rollout_mcp.services.connection import get_connection_with_retry
from rollout_mcp.utils.shell import command_line

if TYPE_CHECKING:
    from rollout_mcp.models import SSHHost
    from rollout_mcp.protocols import SSHConnectionPool

logger = logging.getLogger(__name__)


def _decode(stream: str | bytes | None) -> str:
    """Normalize process output to text."""
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


class SSHTransport:
    """FileStager, RemoteInvoker and RemoteDeleter over pooled SSH connections."""

    def __init__(self, pool: "SSHConnectionPool") -> None:
        self.pool = pool

    async def copy_tree(self, host: "SSHHost", source_dir: str, dest_path: str) -> None:
        """Copy the local folder into ``dest_path``, overwriting existing files.

        File modes are preserved so a staged executable keeps its execute bit.
        """
        conn = await get_connection_with_retry(self.pool, host)
        async with conn.start_sftp_client() as sftp:
            await sftp.makedirs(dest_path, exist_ok=True)
            await sftp.put(source_dir, dest_path, recurse=True, preserve=True)

    async def invoke(
        self, host: "SSHHost", command: str, args: Sequence[str]
    ) -> CommandResult:
        """Run the command and wait for it to exit."""
        conn = await get_connection_with_retry(self.pool, host)
        result = await conn.run(command_line(command, args), check=False)

        returncode = result.returncode
        if returncode is None:
            # Killed by a signal or the channel closed without exit status
            returncode = -1

        return CommandResult(
            output=_decode(result.stdout),
            error=_decode(result.stderr),
            returncode=returncode,
        )

    async def delete(self, host: "SSHHost", path: str) -> None:
        """Recursively delete ``path``; a path that is already gone is fine."""
        conn = await get_connection_with_retry(self.pool, host)
        async with conn.start_sftp_client() as sftp:
            try:
                await sftp.rmtree(path)
            except asyncssh.SFTPNoSuchFile:
                logger.debug("Nothing to clean up at %s on %s", path, host.name)
