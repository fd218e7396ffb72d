"""Stage, install and clean up one artifact on one host."""

import asyncio
import dataclasses
import logging
from typing import TYPE_CHECKING

from rollout_mcp.models import (
    ExecutionFailure,
    HostResult,
    InstallFailure,
    StagingFailure,
    Success,
    build_install_command,
)

if TYPE_CHECKING:
    from rollout_mcp.models import ArtifactDescriptor, SSHHost
    from rollout_mcp.protocols import RemoteTransport

logger = logging.getLogger(__name__)


def _error_text(error: BaseException) -> str:
    """Readable message for exceptions whose str() may be empty."""
    if isinstance(error, TimeoutError):
        return "timed out"
    return str(error) or type(error).__name__


class RemoteHostOperation:
    """Three-step per-host workflow: stage -> install -> cleanup.

    Every failure is returned as a HostResult; nothing a single host does
    is raised to the caller.
    """

    def __init__(
        self,
        transport: "RemoteTransport",
        staging_root: str,
        copy_timeout: float | None = None,
        command_timeout: float | None = None,
        cleanup_timeout: float | None = None,
    ) -> None:
        """Initialize the operation.

        Args:
            transport: Remote copy/invoke/delete implementation
            staging_root: Folder on each host that receives the artifact folder
            copy_timeout: Seconds allowed for staging (None = unbounded)
            command_timeout: Seconds allowed for the install (None = unbounded)
            cleanup_timeout: Seconds allowed for deleting the staged folder
                (None = unbounded)
        """
        self.transport = transport
        self.staging_root = staging_root
        self.copy_timeout = copy_timeout
        self.command_timeout = command_timeout
        self.cleanup_timeout = cleanup_timeout

    async def execute(self, host: "SSHHost", artifact: "ArtifactDescriptor") -> HostResult:
        """Install ``artifact`` on ``host`` and report the outcome."""
        staged_folder = artifact.staged_folder(self.staging_root)
        remote_executable = artifact.staged_executable(self.staging_root)

        logger.info(
            "[%s] Copying %s to %s",
            host.name,
            artifact.source_dir,
            self.staging_root,
        )
        try:
            await asyncio.wait_for(
                self.transport.copy_tree(host, artifact.source_dir, self.staging_root),
                timeout=self.copy_timeout,
            )
        except TimeoutError:
            # A partial tree may already be on the host
            logger.error("[%s] Staging timed out after %ss", host.name, self.copy_timeout)
            timed_out = ExecutionFailure(host.name, message="staging timed out")
            return await self._cleanup(host, staged_folder, timed_out)
        except Exception as e:
            reason = _error_text(e)
            logger.error("[%s] Staging failed: %s", host.name, reason)
            return StagingFailure(host.name, reason=reason)

        command, args = build_install_command(remote_executable, artifact)
        logger.info("[%s] Running %s %s", host.name, command, " ".join(args))

        try:
            completed = await asyncio.wait_for(
                self.transport.invoke(host, command, args),
                timeout=self.command_timeout,
            )
        except Exception as e:
            message = _error_text(e)
            logger.error("[%s] Execution failed: %s", host.name, message)
            result: HostResult = ExecutionFailure(host.name, message=message)
        else:
            if completed.succeeded:
                logger.info("[%s] Install succeeded (code 0)", host.name)
                result = Success(host.name)
            else:
                logger.error(
                    "[%s] Install failed with code %d%s",
                    host.name,
                    completed.returncode,
                    f": {completed.error.strip()}" if completed.error.strip() else "",
                )
                result = InstallFailure(host.name, code=completed.returncode)

        return await self._cleanup(host, staged_folder, result)

    async def _cleanup(
        self, host: "SSHHost", staged_folder: str, result: HostResult
    ) -> HostResult:
        """Delete the staged folder; a failure here never changes ``result``."""
        logger.info("[%s] Cleaning up %s", host.name, staged_folder)
        try:
            await asyncio.wait_for(
                self.transport.delete(host, staged_folder),
                timeout=self.cleanup_timeout,
            )
        except Exception as e:
            error = _error_text(e)
            logger.warning("[%s] Cleanup of %s failed: %s", host.name, staged_folder, error)
            return dataclasses.replace(result, cleanup_error=error)
        return result
