"""Rollout MCP FastMCP server.

Thin wiring of the rollout tool and resources; the work happens in
services/.
"""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from rollout_mcp.middleware import ErrorHandlingMiddleware
from rollout_mcp.resources import last_run_resource, list_hosts_resource
from rollout_mcp.services import get_config, get_pool
from rollout_mcp.tools import rollout
from rollout_mcp.utils.console import RequestFormatter


def _configure_logging() -> None:
    """Configure console logging for the rollout_mcp package.

    Called at import time so loggers are configured however the server
    is started.
    """
    log_level = os.getenv("ROLLOUT_LOG_LEVEL", "INFO").upper()
    use_colors = os.getenv("ROLLOUT_LOG_COLORS", "true").lower() != "false"

    if not sys.stderr.isatty():
        use_colors = False

    level = getattr(logging, log_level, logging.INFO)
    package_logger = logging.getLogger("rollout_mcp")
    package_logger.setLevel(level)

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(RequestFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    for noisy_logger in [
        "asyncssh",
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "httpx",
        "httpcore",
        "fastmcp",
        "starlette",
        "anyio",
    ]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


_configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Load SSH hosts at startup and close SSH connections on shutdown."""
    logger.info("Rollout MCP server starting up")

    hosts = get_config().get_hosts()
    logger.info(
        "Loaded %d SSH host(s): %s",
        len(hosts),
        ", ".join(sorted(hosts)) if hosts else "(none)",
    )
    logger.info("Rollout MCP server ready to accept connections")

    try:
        yield {"hosts": list(hosts)}
    finally:
        logger.info("Rollout MCP server shutting down")
        pool = get_pool()
        if pool.pool_size > 0:
            await pool.close_all()
        logger.info("Rollout MCP server shutdown complete")


def create_server() -> FastMCP:
    """Create and configure the MCP server.

    Returns:
        Configured FastMCP server instance
    """
    server = FastMCP("rollout_mcp", lifespan=app_lifespan)

    settings = get_config().settings
    server.add_middleware(ErrorHandlingMiddleware(include_traceback=settings.include_traceback))

    server.tool()(rollout)

    server.resource("hosts://list")(list_hosts_resource)
    server.resource("rollout://last")(last_run_resource)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
