"""Entry point for the rollout_mcp server."""

import logging

from rollout_mcp.server import mcp  # Importing the server also configures logging
from rollout_mcp.services import get_config

logger = logging.getLogger(__name__)


def run_server() -> None:
    """Run the MCP server with the configured transport."""
    settings = get_config().settings

    if settings.transport == "stdio":
        logger.info("Starting Rollout MCP server (transport=stdio)")
        mcp.run(transport="stdio")
    else:
        logger.info(
            "Starting Rollout MCP server (transport=http, host=%s, port=%d)",
            settings.http_host,
            settings.http_port,
        )
        mcp.run(
            transport="http",
            host=settings.http_host,
            port=settings.http_port,
        )


if __name__ == "__main__":
    run_server()
