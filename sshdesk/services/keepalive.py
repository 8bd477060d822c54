"""Manual liveness probes."""

import logging
from typing import TYPE_CHECKING

from sshdesk.services.errors import TransportIOError, translate_errors

if TYPE_CHECKING:
    import asyncssh

logger = logging.getLogger(__name__)


async def send_keepalive(
    conn: "asyncssh.SSHClientConnection",
    interval: int,
) -> int:
    """Send one liveness message on a connection.

    The probe is a no-reply SSH debug message, which resets the server's idle
    timer without producing output anywhere.

    Args:
        conn: SSH connection to probe
        interval: Configured keepalive interval in seconds

    Returns:
        Seconds until the next probe is due.

    Raises:
        TransportIOError: If the connection is already closed
    """
    if conn.is_closed():
        raise TransportIOError("connection is closed")

    with translate_errors():
        conn.send_debug("keepalive", always_display=False)

    logger.debug("Keepalive sent, next in %ds", interval)
    return interval
