"""Classification of batch hosts into succeeded / failed / skipped."""

import asyncio
import logging
from collections.abc import Iterable

from rollout_mcp.models import HostResult

logger = logging.getLogger(__name__)


class ResultLedger:
    """Accumulates host outcomes across rounds.

    ``succeeded`` only grows. ``failed`` holds the current round's failures
    until the scheduler drains them into the next working set. ``skipped``
    is filled by discovery and never retried.
    """

    def __init__(self) -> None:
        self._succeeded: dict[str, None] = {}
        self._failed: dict[str, None] = {}
        self._skipped: dict[str, None] = {}
        self._reasons: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def record(self, result: HostResult) -> None:
        """Record one host's outcome for the current round."""
        async with self._lock:
            host = result.host
            if result.success:
                self._failed.pop(host, None)
                self._reasons.pop(host, None)
                self._succeeded[host] = None
            elif host not in self._succeeded:
                self._failed[host] = None
                self._reasons[host] = result.describe()
            else:
                logger.warning("Ignoring failure for %s, already succeeded", host)

    async def drain_failures(self) -> tuple[str, ...]:
        """Return this round's failures and clear them."""
        async with self._lock:
            drained = tuple(self._failed)
            self._failed.clear()
            return drained

    def restore_failures(self, hosts: Iterable[str]) -> None:
        """Put a drained, not-retried failure set back for reporting."""
        for host in hosts:
            if host not in self._succeeded:
                self._failed[host] = None

    def mark_skipped(self, hosts: Iterable[str], reason: str = "skipped by discovery") -> None:
        """Record hosts that never enter the batch."""
        for host in hosts:
            if host in self._succeeded or host in self._failed:
                continue
            self._skipped[host] = None
            self._reasons.setdefault(host, reason)

    @property
    def succeeded(self) -> tuple[str, ...]:
        return tuple(self._succeeded)

    @property
    def failed(self) -> tuple[str, ...]:
        return tuple(self._failed)

    @property
    def skipped(self) -> tuple[str, ...]:
        return tuple(self._skipped)

    @property
    def reasons(self) -> dict[str, str]:
        """Last failure (or skip) reason per host not in ``succeeded``."""
        return dict(self._reasons)
