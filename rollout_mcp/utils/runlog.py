"""Per-run log file attached to the package logger.

Several rollouts can run at once in one server process. Each run log only
keeps records emitted from inside its own run, tracked with a context
variable that asyncio copies into every task the run starts.
"""

import logging
import re
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path

from rollout_mcp.errors import RunLogError
from rollout_mcp.utils.console import RunLogFormatter

PACKAGE_LOGGER = "rollout_mcp"

_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")

_current_run: ContextVar[str | None] = ContextVar("rollout_run_id", default=None)

# Package logger level saved while run logs are open
_active_runs = 0
_saved_level: int | None = None


def safe_name(value: str) -> str:
    """Reduce a value to characters safe for file names."""
    return _UNSAFE_NAME_RE.sub("_", value).strip("_") or "artifact"


def timestamp(now: datetime | None = None) -> str:
    """File name timestamp, e.g. 20260118-093012."""
    return (now or datetime.now()).strftime("%Y%m%d-%H%M%S")


def unique_path(path: Path) -> Path:
    """``path``, or ``<stem>_2<suffix>``, ``_3``... if it already exists."""
    candidate = path
    counter = 2
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}_{counter}{path.suffix}")
        counter += 1
    return candidate


class RunFilter(logging.Filter):
    """Pass only records logged while ``run_id`` is the current run."""

    def __init__(self, run_id: str) -> None:
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        return _current_run.get() == self.run_id


def _raise_package_level(package_logger: logging.Logger) -> None:
    """Make sure INFO reaches the run logs while any run is open."""
    global _active_runs, _saved_level
    if _active_runs == 0 and package_logger.getEffectiveLevel() > logging.INFO:
        _saved_level = package_logger.level
        package_logger.setLevel(logging.INFO)
    _active_runs += 1


def _restore_package_level(package_logger: logging.Logger) -> None:
    global _active_runs, _saved_level
    _active_runs -= 1
    if _active_runs == 0 and _saved_level is not None:
        package_logger.setLevel(_saved_level)
        _saved_level = None


@contextmanager
def run_log(
    log_dir: str | Path,
    artifact_name: str,
    now: datetime | None = None,
) -> Iterator[Path]:
    """Capture everything the package logs during a run into its own file.

    Args:
        log_dir: Directory for run logs (created if missing)
        artifact_name: Artifact file name, used in the log file name
        now: Clock override for the file name

    Yields:
        Path of the log file

    Raises:
        RunLogError: If the directory or file cannot be created
    """
    path = Path(log_dir) / f"rollout_{safe_name(artifact_name)}_{timestamp(now)}.log"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path = unique_path(path)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        raise RunLogError(str(path), e) from e

    run_id = uuid.uuid4().hex
    handler.setLevel(logging.INFO)
    handler.setFormatter(RunLogFormatter())
    handler.addFilter(RunFilter(run_id))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    _raise_package_level(package_logger)
    package_logger.addHandler(handler)
    token = _current_run.set(run_id)

    try:
        yield path
    finally:
        _current_run.reset(token)
        package_logger.removeHandler(handler)
        handler.close()
        _restore_package_level(package_logger)
