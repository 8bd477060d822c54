"""Registry of live, authenticated SSH connections.

Locking Strategy:
- `_lock`: Protects the `_connections` dict. Held only for lookups and
  mutations, never across network I/O.
- Per-connection `io_lock`: Serializes blocking operations (command
  execution, SFTP, keepalive, channel opens) on one connection. Operations
  on different connections never contend.
- Lock acquisition order: registry lock first, released before taking a
  connection's io_lock.
"""

import asyncio
import itertools
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from typing import Any

import asyncssh

from sshdesk.models import ConnectionInfo, ConnectRequest, PasswordAuth
from sshdesk.models.connection import utc_now
from sshdesk.services.errors import (
    ConnectionNotFoundError,
    InvalidInputError,
    translate_errors,
)

logger = logging.getLogger(__name__)


@dataclass
class ConnectionHandle:
    """An authenticated connection and the socket it owns.

    asyncssh keeps the socket inside the connection object, so both live and
    die together.
    """

    info: ConnectionInfo
    connection: asyncssh.SSHClientConnection
    sequence: int = 0
    io_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def id(self) -> str:
        return self.info.id

    def touch(self) -> None:
        """Update last-activity timestamp."""
        self.info.last_active_at = utc_now()

    async def close(self) -> None:
        """Close the connection, logging rather than raising on failure."""
        try:
            self.connection.close()
            await self.connection.wait_closed()
        except Exception as e:
            logger.warning("Error while closing connection %s: %s", self.id, e)


class ConnectionRegistry:
    """Mapping of connection id to :class:`ConnectionHandle`."""

    def __init__(
        self,
        keepalive_interval: int = 30,
        connect_timeout: int | None = None,
        known_hosts: str | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            keepalive_interval: Seconds between automatic liveness probes
            connect_timeout: Transport connect timeout, or None for the
                library default
            known_hosts: Path to known_hosts file, or None to disable
                host key verification
        """
        self.keepalive_interval = keepalive_interval
        self.connect_timeout = connect_timeout
        self._known_hosts = known_hosts
        self._connections: dict[str, ConnectionHandle] = {}
        self._lock = asyncio.Lock()
        self._sequence = itertools.count()
        self._shut_down = False

        if self._known_hosts is None:
            logger.warning(
                "SSH host key verification DISABLED - vulnerable to MITM attacks. "
                "Set SSHDESK_KNOWN_HOSTS to a valid known_hosts file path."
            )
        else:
            logger.info("SSH host key verification enabled (known_hosts=%s)", known_hosts)

    def _ensure_usable(self) -> None:
        if self._shut_down:
            raise InvalidInputError("connection registry is shut down")

    def _connect_options(self, request: ConnectRequest) -> dict[str, Any]:
        """Build asyncssh.connect keyword arguments for a request."""
        options: dict[str, Any] = {
            "port": request.port,
            "username": request.username.strip(),
            "known_hosts": self._known_hosts,
            "keepalive_interval": self.keepalive_interval,
            "agent_path": None,
        }
        if self.connect_timeout:
            options["connect_timeout"] = self.connect_timeout

        auth = request.auth
        if isinstance(auth, PasswordAuth):
            options["password"] = auth.password
            # Explicit None turns off public key auth entirely
            options["client_keys"] = None
        else:
            options["client_keys"] = [auth.private_key_path.strip()]
            options["passphrase"] = auth.passphrase
        return options

    async def create(self, request: ConnectRequest) -> ConnectionInfo:
        """Connect, authenticate and register a new connection.

        asyncssh.connect only returns once authentication has succeeded and
        tears the transport down itself on failure, so an unauthenticated
        connection never reaches the registry.

        Raises:
            InvalidInputError: If host or username is blank
            AuthenticationFailedError: If the server rejects the credentials
            TransportIOError: If the socket cannot be opened
            SSHProtocolError: On handshake or other protocol failures
        """
        if not request.host.strip() or not request.username.strip():
            raise InvalidInputError("host and username are required")
        self._ensure_usable()

        logger.info(
            "Opening SSH connection to %s@%s:%d",
            request.username,
            request.host,
            request.port,
        )
        with translate_errors():
            conn = await asyncssh.connect(
                request.host.strip(),
                **self._connect_options(request),
            )

        now = utc_now()
        info = ConnectionInfo(
            id=str(uuid.uuid4()),
            label=request.display_label,
            host=request.host,
            port=request.port,
            username=request.username,
            connected_at=now,
            last_active_at=now,
        )
        handle = ConnectionHandle(
            info=info,
            connection=conn,
            sequence=next(self._sequence),
        )

        async with self._lock:
            refused = self._shut_down
            if not refused:
                self._connections[info.id] = handle

        if refused:
            await handle.close()
            raise InvalidInputError("connection registry is shut down")

        logger.info(
            "SSH connection established: %s (%s, connections=%d)",
            info.id,
            info.label,
            len(self._connections),
        )
        return replace(info)

    async def list(self) -> list[ConnectionInfo]:
        """Return all connections, most recently connected first."""
        async with self._lock:
            self._ensure_usable()
            handles = sorted(
                self._connections.values(),
                key=lambda h: (h.info.connected_at, h.sequence),
                reverse=True,
            )
            return [replace(h.info) for h in handles]

    async def get(self, connection_id: str) -> ConnectionHandle:
        """Look up a live connection.

        Raises:
            ConnectionNotFoundError: If no connection has this id
        """
        async with self._lock:
            self._ensure_usable()
            handle = self._connections.get(connection_id)
            if handle is None:
                raise ConnectionNotFoundError(connection_id)
            return handle

    async def contains(self, connection_id: str) -> bool:
        async with self._lock:
            return connection_id in self._connections

    @asynccontextmanager
    async def lease(self, connection_id: str) -> AsyncIterator[ConnectionHandle]:
        """Hold a connection's io_lock for the duration of the block."""
        handle = await self.get(connection_id)
        async with handle.io_lock:
            yield handle

    async def touch(self, connection_id: str) -> None:
        """Mark a connection active, ignoring ids that are already gone."""
        async with self._lock:
            handle = self._connections.get(connection_id)
            if handle is not None:
                handle.touch()

    async def remove(self, connection_id: str) -> ConnectionHandle:
        """Unregister a connection without closing it.

        Raises:
            ConnectionNotFoundError: If no connection has this id
        """
        async with self._lock:
            self._ensure_usable()
            handle = self._connections.pop(connection_id, None)
            if handle is None:
                raise ConnectionNotFoundError(connection_id)
            logger.info(
                "Removing connection %s (%s, connections=%d)",
                connection_id,
                handle.info.label,
                len(self._connections),
            )
            return handle

    async def close_all(self) -> None:
        """Close every connection and refuse further use."""
        async with self._lock:
            self._shut_down = True
            handles = list(self._connections.values())
            self._connections.clear()

        if handles:
            logger.info("Closing all %d connection(s)", len(handles))
        for handle in handles:
            await handle.close()

    @property
    def size(self) -> int:
        """Return the current number of registered connections."""
        return len(self._connections)
