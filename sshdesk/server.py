"""sshdesk FastMCP server.

Wires the tools and middleware to a server instance. Session state lives in
the Dependencies container attached to the server; tools reach it through
their request context.
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

from sshdesk.config import Settings
from sshdesk.dependencies import Dependencies
from sshdesk.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from sshdesk.tools import ALL_TOOLS
from sshdesk.utils.console import ConsoleFormatter

NOISY_LOGGERS = [
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "asyncssh",
    "httpx",
    "httpcore",
    "fastmcp",
    "starlette",
    "anyio",
]


def _configure_logging() -> None:
    """Configure colorful logging for the sshdesk package.

    Runs at import time so logging is ready however the server is started.
    """
    log_level = os.getenv("SSHDESK_LOG_LEVEL", "INFO").upper()
    use_colors = os.getenv("SSHDESK_LOG_COLORS", "true").lower() != "false"

    if not sys.stderr.isatty():
        use_colors = False

    desk_logger = logging.getLogger("sshdesk")
    desk_logger.setLevel(getattr(logging, log_level, logging.INFO))

    if not desk_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
        desk_logger.addHandler(handler)
        desk_logger.propagate = False

    for noisy_logger in NOISY_LOGGERS:
        lg = logging.getLogger(noisy_logger)
        lg.setLevel(logging.WARNING)
        lg.handlers = []
        lg.propagate = False

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.WARNING)


_configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Close every terminal and connection when the server stops.

    Args:
        server: The FastMCP server instance

    Yields:
        Dict with the active transport settings
    """
    deps: Dependencies = server.deps  # type: ignore[attr-defined]
    logger.info("sshdesk server starting up")
    logger.info(
        "Keepalive every %ds, terminal buffer limit %d bytes",
        deps.config.keepalive_interval,
        deps.config.terminal_buffer_limit,
    )

    try:
        yield {"transport": deps.config.transport}
    finally:
        logger.info("sshdesk server shutting down")
        if deps.connections.size > 0 or deps.terminals.size > 0:
            logger.info(
                "Closing %d terminal(s) and %d connection(s)",
                deps.terminals.size,
                deps.connections.size,
            )
        await deps.cleanup()
        logger.info("sshdesk server shutdown complete")


def configure_middleware(server: FastMCP, settings: Settings) -> None:
    """Configure middleware stack for the server.

    Adds middleware in order: ErrorHandling -> Logging (with timing)

    Args:
        server: The FastMCP server to configure.
        settings: Settings supplying payload logging, slow request threshold
            and traceback options.
    """
    # First added = innermost
    server.add_middleware(
        ErrorHandlingMiddleware(include_traceback=settings.include_traceback)
    )
    server.add_middleware(
        LoggingMiddleware(
            include_payloads=settings.log_payloads,
            slow_threshold_ms=float(settings.slow_threshold_ms),
        )
    )


def create_server(deps: Dependencies | None = None) -> FastMCP:
    """Create and configure the MCP server with tools and middleware.

    Args:
        deps: Dependencies to attach; built from the environment if omitted.

    Returns:
        Configured FastMCP server instance
    """
    if deps is None:
        deps = Dependencies.create()

    server = FastMCP("sshdesk", lifespan=app_lifespan)
    server.deps = deps  # type: ignore[attr-defined]

    configure_middleware(server, deps.config)

    for tool in ALL_TOOLS:
        server.tool(tool)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
