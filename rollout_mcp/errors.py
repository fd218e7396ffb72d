"""Fatal errors that abort a rollout before any host is touched.

Per-host failures are never raised; they are returned as HostResult
values and recorded in the ledger.
"""


class RolloutError(Exception):
    """Base class for errors that stop a rollout before scheduling."""


class ArtifactNotFoundError(RolloutError):
    """Artifact source path does not exist or is not a readable file."""

    def __init__(self, path: str, reason: str = "not found"):
        """Initialize artifact error.

        Args:
            path: Artifact path as given by the caller
            reason: Short description of what is wrong with it
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Artifact {path}: {reason}")


class EmptyBatchError(RolloutError):
    """Discovery produced no hosts to install on."""

    def __init__(self, skipped: tuple[str, ...] = ()):
        """Initialize empty batch error.

        Args:
            skipped: Hosts discovery skipped, if any
        """
        self.skipped = skipped
        message = "No hosts to install on"
        if skipped:
            message += f" ({len(skipped)} skipped: {', '.join(skipped)})"
        super().__init__(message)


class RunLogError(RolloutError):
    """Run log destination could not be created."""

    def __init__(self, path: str, original_error: Exception):
        """Initialize run log error.

        Args:
            path: Log file path that could not be opened
            original_error: Underlying OS error
        """
        self.path = path
        self.original_error = original_error
        super().__init__(f"Cannot create run log {path}: {original_error}")


class HostListError(RolloutError):
    """Host list file could not be read."""

    def __init__(self, path: str, original_error: Exception):
        """Initialize host list error.

        Args:
            path: Host list file path
            original_error: Underlying OS or CSV error
        """
        self.path = path
        self.original_error = original_error
        super().__init__(f"Cannot read host list {path}: {original_error}")
