"""Settings read from ``SSHDESK_*`` environment variables.

Malformed values never stop the server: they are logged and replaced by
the default.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TRANSPORTS = ("http", "stdio")
TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _env_int(key: str, default: int, *, positive: bool = False) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer, using %d", key, raw, default)
        return default
    if positive and value <= 0:
        logger.warning("%s must be positive, got %d, using %d", key, value, default)
        return default
    return value


def _env_flag(key: str) -> bool:
    return os.getenv(key, "").strip().lower() in TRUE_VALUES


@dataclass
class Settings:
    """Runtime settings. Defaults apply when a variable is unset."""

    # SSH
    keepalive_interval: int = 30
    connect_timeout: int | None = None
    known_hosts_path: str | None = None

    # Channels
    transfer_chunk_size: int = 32_768
    terminal_buffer_limit: int = 1_048_576

    # Server
    transport: str = "http"
    http_host: str = "127.0.0.1"
    http_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_payloads: bool = False
    slow_threshold_ms: int = 1000
    include_traceback: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        ``SSHDESK_CONNECT_TIMEOUT`` of zero or less and an empty
        ``SSHDESK_KNOWN_HOSTS`` mean "not set".
        """
        transport = os.getenv("SSHDESK_TRANSPORT", "http").strip().lower()
        if transport not in TRANSPORTS:
            logger.warning("Unknown SSHDESK_TRANSPORT %r, using http", transport)
            transport = "http"

        connect_timeout = _env_int("SSHDESK_CONNECT_TIMEOUT", 0)

        return cls(
            keepalive_interval=_env_int("SSHDESK_KEEPALIVE_INTERVAL", 30, positive=True),
            connect_timeout=connect_timeout if connect_timeout > 0 else None,
            known_hosts_path=os.getenv("SSHDESK_KNOWN_HOSTS", "").strip() or None,
            transfer_chunk_size=_env_int(
                "SSHDESK_TRANSFER_CHUNK_SIZE", 32_768, positive=True
            ),
            terminal_buffer_limit=_env_int(
                "SSHDESK_TERMINAL_BUFFER_LIMIT", 1_048_576, positive=True
            ),
            transport=transport,
            http_host=os.getenv("SSHDESK_HTTP_HOST", "127.0.0.1"),
            http_port=_env_int("SSHDESK_HTTP_PORT", 8000, positive=True),
            log_level=os.getenv("SSHDESK_LOG_LEVEL", "INFO").strip().upper(),
            log_payloads=_env_flag("SSHDESK_LOG_PAYLOADS"),
            slow_threshold_ms=_env_int("SSHDESK_SLOW_THRESHOLD_MS", 1000, positive=True),
            include_traceback=_env_flag("SSHDESK_INCLUDE_TRACEBACK"),
        )
