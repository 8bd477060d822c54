"""Entry point: ``python -m sshdesk`` or the ``sshdesk`` script."""

import logging

from sshdesk.server import mcp  # importing the server configures logging

logger = logging.getLogger(__name__)


def run_server() -> None:
    """Run the MCP server on the configured transport."""
    config = mcp.deps.config  # type: ignore[attr-defined]

    if config.transport == "stdio":
        logger.info("Starting sshdesk server (transport=stdio, log level %s)", config.log_level)
        mcp.run(transport="stdio")
        return

    logger.info(
        "Starting sshdesk server on http://%s:%d/mcp (log level %s)",
        config.http_host,
        config.http_port,
        config.log_level,
    )
    mcp.run(transport="http", host=config.http_host, port=config.http_port)


if __name__ == "__main__":
    run_server()
