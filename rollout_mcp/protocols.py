"""Protocol interfaces for the capabilities a rollout consumes.

The scheduler and host operation depend only on these, so tests (or an
alternative transport) can stand in for the asyncssh implementation:

    class FakeTransport:
        async def copy_tree(self, host, source_dir, dest_path): ...
        async def invoke(self, host, command, args): ...
        async def delete(self, host, path): ...

    RemoteHostOperation(FakeTransport(), staging_root="/tmp/rollout")
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from rollout_mcp.models import CommandResult, SSHHost

if TYPE_CHECKING:
    from rollout_mcp.services.discovery import HostBatch


@runtime_checkable
class SSHConnectionPool(Protocol):
    """Connection management used by the SSH transport."""

    async def get_connection(self, host: SSHHost) -> Any:
        """Get or create connection for host."""
        ...

    async def remove_connection(self, host_name: str) -> None:
        """Drop the connection for host, if any."""
        ...

    async def close_all(self) -> None:
        """Close every pooled connection."""
        ...


@runtime_checkable
class FileStager(Protocol):
    """Recursive, force-overwriting copy of a local folder to a host."""

    async def copy_tree(self, host: SSHHost, source_dir: str, dest_path: str) -> None:
        """Copy ``source_dir`` into ``dest_path`` on the host.

        Raises:
            Exception: Any failure; the caller classifies it as staging failure
        """
        ...


@runtime_checkable
class RemoteInvoker(Protocol):
    """Runs a command on a host and waits for it to exit."""

    async def invoke(
        self, host: SSHHost, command: str, args: Sequence[str]
    ) -> CommandResult:
        """Run the command and return its exit status and output.

        Raises:
            Exception: When the execution channel itself fails
        """
        ...


@runtime_checkable
class RemoteDeleter(Protocol):
    """Recursive forced delete on a host."""

    async def delete(self, host: SSHHost, path: str) -> None:
        """Delete ``path`` and everything below it."""
        ...


@runtime_checkable
class RemoteTransport(FileStager, RemoteInvoker, RemoteDeleter, Protocol):
    """All three remote capabilities on one object."""


@runtime_checkable
class HostDiscovery(Protocol):
    """Produces the batch of hosts for a run."""

    async def discover(self) -> "HostBatch":
        """Return resolved hosts plus the identifiers that were skipped."""
        ...
