"""Shared fixtures: a scripted in-memory transport and a staged artifact."""

import asyncio
from collections.abc import Sequence
from pathlib import Path

import pytest

from rollout_mcp.models import ArtifactDescriptor, CommandResult, SSHHost


class FakeTransport:
    """Scripted stand-in for SSHTransport.

    ``script`` maps a host name to one step per attempt:
    "ok", "stage" (copy raises), "exit:<code>" (installer exits nonzero)
    or "channel" (invoke raises). Hosts without steps left succeed.
    """

    def __init__(
        self,
        script: dict[str, Sequence[str]] | None = None,
        delete_errors: set[str] | None = None,
    ) -> None:
        self.script = {host: list(steps) for host, steps in (script or {}).items()}
        self.delete_errors = delete_errors or set()
        self.copies: list[tuple[str, str, str]] = []
        self.invokes: list[tuple[str, str, tuple[str, ...]]] = []
        self.deletes: list[tuple[str, str]] = []
        self._pending: dict[str, str] = {}

    async def copy_tree(self, host: SSHHost, source_dir: str, dest_path: str) -> None:
        await asyncio.sleep(0)
        steps = self.script.get(host.name)
        step = steps.pop(0) if steps else "ok"
        self.copies.append((host.name, source_dir, dest_path))
        if step == "stage":
            raise OSError("copy interrupted")
        self._pending[host.name] = step

    async def invoke(
        self, host: SSHHost, command: str, args: Sequence[str]
    ) -> CommandResult:
        await asyncio.sleep(0)
        self.invokes.append((host.name, command, tuple(args)))
        step = self._pending.pop(host.name, "ok")
        if step == "channel":
            raise OSError("remote execution channel closed")
        if step.startswith("exit:"):
            return CommandResult(output="", error="installer error", returncode=int(step[5:]))
        return CommandResult(output="installed", error="", returncode=0)

    async def delete(self, host: SSHHost, path: str) -> None:
        self.deletes.append((host.name, path))
        if host.name in self.delete_errors:
            raise OSError("permission denied")

    def invoked_hosts(self) -> list[str]:
        return [host for host, _, _ in self.invokes]


@pytest.fixture
def fake_transport() -> type[FakeTransport]:
    """The FakeTransport class, for tests to build with their own script."""
    return FakeTransport


@pytest.fixture
def artifact_path(tmp_path: Path) -> Path:
    """An installer inside its own folder, next to a support file."""
    folder = tmp_path / "pkgs" / "agent"
    folder.mkdir(parents=True)
    (folder / "agent.msi").write_bytes(b"MSI")
    (folder / "agent.cfg").write_text("server=central\n")
    return folder / "agent.msi"


@pytest.fixture
def artifact(artifact_path: Path) -> ArtifactDescriptor:
    return ArtifactDescriptor.from_path(artifact_path)


def make_hosts(*names: str) -> list[SSHHost]:
    return [SSHHost(name=name, hostname=f"{name}.example.com") for name in names]


@pytest.fixture
def hosts_factory():
    """Build SSHHost entries from names."""
    return make_hosts
