"""Error handling middleware: log and count failed MCP requests."""

import logging
from collections import Counter
from typing import Any

from fastmcp.server.middleware import Middleware, MiddlewareContext


class ErrorHandlingMiddleware(Middleware):
    """Logs exceptions raised by tools/resources and re-raises them.

    Keeps per-exception-type counts for diagnostics.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
    ) -> None:
        """Initialize error handling middleware.

        Args:
            logger: Optional custom logger.
            include_traceback: Whether to log the full traceback.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.include_traceback = include_traceback
        self._error_counts: Counter[str] = Counter()

    def get_error_stats(self) -> dict[str, int]:
        """Error counts by exception type name."""
        return dict(self._error_counts)

    def reset_stats(self) -> None:
        self._error_counts.clear()

    async def on_message(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Run the next handler, logging any exception before re-raising."""
        try:
            return await call_next(context)
        except Exception as e:
            error_type = type(e).__name__
            self._error_counts[error_type] += 1
            self.logger.error(
                "Error in %s: %s: %s",
                context.method,
                error_type,
                e,
                exc_info=self.include_traceback,
            )
            raise
