"""Install artifact description and install command construction."""

import posixpath
import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from rollout_mcp.errors import ArtifactNotFoundError

# Operator-facing spelling for "no install arguments"
NO_ARGS_SENTINEL = "none"


@dataclass(frozen=True)
class InstallerPackage:
    """Platform installer used for a package file type.

    Builds ``command [options] verb <package>`` or
    ``command verb <package> [options]`` depending on ``options_first``.
    """

    command: str
    verb: tuple[str, ...]
    default_args: tuple[str, ...]
    options_first: bool = False

    def build(
        self, package_path: str, args: tuple[str, ...] | None
    ) -> tuple[str, tuple[str, ...]]:
        """Return (command, argv) for installing ``package_path``."""
        options = self.default_args if args is None else args
        if self.options_first:
            return self.command, (*options, *self.verb, package_path)
        return self.command, (*self.verb, package_path, *options)


INSTALLER_PACKAGES: dict[str, InstallerPackage] = {
    ".msi": InstallerPackage("msiexec", ("/i",), ("/qn", "/norestart")),
    ".msp": InstallerPackage("msiexec", ("/p",), ("/qn", "/norestart")),
    ".deb": InstallerPackage(
        "dpkg",
        ("-i",),
        ("--force-confdef", "--force-confold"),
        options_first=True,
    ),
    ".rpm": InstallerPackage("rpm", ("-U",), ("--quiet",), options_first=True),
}


def parse_install_args(value: str | Sequence[str] | None) -> tuple[str, ...] | None:
    """Normalize install arguments to a tuple, or None when absent.

    The string ``none`` (any case) and empty input both mean "no explicit
    arguments", which selects the installer's silent defaults for package
    types and runs other executables bare.
    """
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped or stripped.lower() == NO_ARGS_SENTINEL:
            return None
        return tuple(shlex.split(stripped))
    args = tuple(str(a) for a in value)
    if not args or (len(args) == 1 and args[0].lower() == NO_ARGS_SENTINEL):
        return None
    return args


@dataclass(frozen=True)
class ArtifactDescriptor:
    """The one software artifact of a run.

    Derived once from the local path: the whole containing folder is staged,
    the file inside it is what gets executed.
    """

    source_path: str
    folder_name: str
    file_name: str
    extension: str
    install_args: tuple[str, ...] | None = None

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        install_args: str | Sequence[str] | None = None,
    ) -> "ArtifactDescriptor":
        """Describe the artifact at ``path``.

        Raises:
            ArtifactNotFoundError: If the path is not a readable file
        """
        source = Path(path).expanduser()
        if not source.exists():
            raise ArtifactNotFoundError(str(path))
        if not source.is_file():
            raise ArtifactNotFoundError(str(path), "not a file")
        try:
            with source.open("rb"):
                pass
        except OSError as e:
            raise ArtifactNotFoundError(str(path), f"unreadable ({e})") from e

        source = source.resolve()
        return cls(
            source_path=str(source),
            folder_name=source.parent.name,
            file_name=source.name,
            extension=source.suffix.lower(),
            install_args=parse_install_args(install_args),
        )

    @property
    def source_dir(self) -> str:
        """Local folder that gets copied to each host."""
        return str(Path(self.source_path).parent)

    @property
    def package(self) -> InstallerPackage | None:
        """Installer for this file type, or None to execute directly."""
        return INSTALLER_PACKAGES.get(self.extension)

    def staged_folder(self, staging_root: str) -> str:
        """Remote path of the staged folder."""
        return posixpath.join(staging_root, self.folder_name)

    def staged_executable(self, staging_root: str) -> str:
        """Remote path of the staged artifact file."""
        return posixpath.join(staging_root, self.folder_name, self.file_name)


def build_install_command(
    remote_path: str, artifact: ArtifactDescriptor
) -> tuple[str, tuple[str, ...]]:
    """Return (command, args) that installs the staged artifact."""
    package = artifact.package
    if package is not None:
        return package.build(remote_path, artifact.install_args)
    return remote_path, artifact.install_args or ()
