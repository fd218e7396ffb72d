"""Host and path validation utilities."""

import posixpath
from typing import Final

# Characters that would let a host name smuggle shell or path syntax
SUSPICIOUS_HOST_CHARS: Final[tuple[str, ...]] = (
    "/", "\\", ";", "&", "|", "$", "`", " ", "\t", "\n", "\r", "\x00",
)


def validate_host(host: str) -> str:
    """Validate a host identifier.

    Args:
        host: The host name to validate

    Returns:
        Stripped host name

    Raises:
        ValueError: If host name is invalid
    """
    host = host.strip()
    if not host:
        raise ValueError("Host cannot be empty")

    if len(host) > 253:
        raise ValueError(f"Host name too long: {len(host)} chars")

    for char in SUSPICIOUS_HOST_CHARS:
        if char in host:
            raise ValueError(f"Host contains invalid characters: {host!r}")

    return host


def validate_staging_root(path: str) -> str:
    """Validate the remote staging folder.

    Cleanup deletes a folder below this path recursively, so it must be an
    explicit absolute path that is not the filesystem root.

    Raises:
        ValueError: If path is empty, relative, contains '..' or is '/'
    """
    if not path or "\x00" in path:
        raise ValueError(f"Invalid staging root: {path!r}")

    normalized = path.replace("\\", "/")
    if ".." in normalized.split("/"):
        raise ValueError(f"Staging root may not contain '..': {path}")

    is_windows_drive = len(normalized) >= 3 and normalized[1] == ":" and normalized[2] == "/"
    if not (normalized.startswith("/") or is_windows_drive):
        raise ValueError(f"Staging root must be absolute: {path}")

    normalized = posixpath.normpath(normalized)
    if not normalized.strip("/") or (is_windows_drive and len(normalized.rstrip("/")) <= 2):
        raise ValueError(f"Staging root cannot be a filesystem root: {path}")

    return normalized
