"""Remote command data models."""

from dataclasses import dataclass


@dataclass
class CommandResult:
    """Result of a remote install command."""

    output: str
    error: str
    returncode: int

    @property
    def succeeded(self) -> bool:
        """Exit code zero is the only success signal."""
        return self.returncode == 0
