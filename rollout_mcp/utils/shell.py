"""Shell command safety utilities.

Commands for Windows hosts run under cmd.exe (the Windows OpenSSH default
shell), which only understands double quotes; everything else is quoted
for a POSIX shell.
"""

import re
import shlex
import subprocess
from collections.abc import Iterable

_DRIVE_RE = re.compile(r"^[A-Za-z]:[\\/]")

# Installers that only exist on Windows
WINDOWS_COMMANDS = frozenset({"msiexec"})


def quote_path(path: str) -> str:
    """Safely quote a path for shell commands."""
    return shlex.quote(path)


def is_windows_command(command: str) -> bool:
    """True for a Windows installer or a program under a drive path."""
    return command.lower() in WINDOWS_COMMANDS or bool(_DRIVE_RE.match(command))


def command_line(command: str, args: Iterable[str] = ()) -> str:
    """Join a command and its arguments into one quoted command line.

    Args:
        command: Program to run
        args: Arguments, each quoted individually

    Returns:
        Command line quoted for cmd.exe when ``command`` targets Windows,
        for a POSIX shell otherwise
    """
    parts = [command, *args]
    if is_windows_command(command):
        return subprocess.list2cmdline(parts)
    return " ".join(shlex.quote(part) for part in parts)
