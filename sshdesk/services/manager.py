"""Session operations over the connection and terminal registries.

Every public coroutine here is one independent request from the boundary.
Each looks up its target, does its work, and records activity on the
owning connection when it succeeds.
"""

import logging

from sshdesk.models import (
    CommandResult,
    ConnectionInfo,
    ConnectRequest,
    DirectoryEntry,
    TerminalSize,
    TransferResult,
)
from sshdesk.services.connections import ConnectionRegistry
from sshdesk.services.errors import ConnectionNotFoundError, InvalidInputError
from sshdesk.services.executors import run_command
from sshdesk.services.keepalive import send_keepalive
from sshdesk.services.sftp import download_file, list_dir, upload_file
from sshdesk.services.terminals import TerminalRegistry

logger = logging.getLogger(__name__)


def _require_paths(local_path: str, remote_path: str) -> None:
    if not local_path.strip() or not remote_path.strip():
        raise InvalidInputError("local_path and remote_path are required")


class SessionManager:
    """Connection, command, transfer and terminal operations."""

    def __init__(
        self,
        connections: ConnectionRegistry,
        terminals: TerminalRegistry,
        transfer_chunk_size: int = 32_768,
    ) -> None:
        self.connections = connections
        self.terminals = terminals
        self.transfer_chunk_size = transfer_chunk_size

    # Connections

    async def create_connection(self, request: ConnectRequest) -> ConnectionInfo:
        return await self.connections.create(request)

    async def list_connections(self) -> list[ConnectionInfo]:
        return await self.connections.list()

    async def close_connection(self, connection_id: str) -> None:
        """Close a connection and every terminal running on it.

        Terminal teardown failures are logged by the terminal registry and
        never fail the close.
        """
        handle = await self.connections.remove(connection_id)
        await self.terminals.close_for_connection(connection_id)
        await handle.close()
        logger.info("Connection %s closed", connection_id)

    async def send_keepalive(self, connection_id: str) -> int:
        async with self.connections.lease(connection_id) as handle:
            seconds = await send_keepalive(
                handle.connection,
                self.connections.keepalive_interval,
            )
            handle.touch()
        return seconds

    # Commands

    async def run_command(self, connection_id: str, command: str) -> CommandResult:
        if not command.strip():
            raise InvalidInputError("command cannot be empty")

        async with self.connections.lease(connection_id) as handle:
            logger.debug("Running command on %s: %s", connection_id, command)
            result = await run_command(handle.connection, command)
            handle.touch()
        return result

    # SFTP

    async def list_dir(self, connection_id: str, path: str = "") -> list[DirectoryEntry]:
        async with self.connections.lease(connection_id) as handle:
            entries = await list_dir(handle.connection, path)
            handle.touch()
        return entries

    async def upload(
        self,
        connection_id: str,
        local_path: str,
        remote_path: str,
    ) -> TransferResult:
        _require_paths(local_path, remote_path)
        async with self.connections.lease(connection_id) as handle:
            result = await upload_file(
                handle.connection,
                local_path,
                remote_path,
                self.transfer_chunk_size,
            )
            handle.touch()
        return result

    async def download(
        self,
        connection_id: str,
        remote_path: str,
        local_path: str,
    ) -> TransferResult:
        _require_paths(local_path, remote_path)
        async with self.connections.lease(connection_id) as handle:
            result = await download_file(
                handle.connection,
                remote_path,
                local_path,
                self.transfer_chunk_size,
            )
            handle.touch()
        return result

    # Terminals

    async def start_terminal(self, connection_id: str, cols: int, rows: int) -> str:
        """Open an interactive shell and return its terminal id.

        Raises:
            ConnectionNotFoundError: If the connection is unknown, or was
                closed while the shell was starting
        """
        async with self.connections.lease(connection_id) as handle:
            terminal = await self.terminals.open(
                connection_id, handle.connection, cols, rows
            )
            handle.touch()

        # A close that raced the open would leave an orphan behind
        if not await self.connections.contains(connection_id):
            await self.terminals.close_for_connection(connection_id)
            raise ConnectionNotFoundError(connection_id)

        return terminal.id

    async def write_terminal(self, terminal_id: str, data: str) -> None:
        async with self.terminals.acquire(terminal_id) as terminal:
            terminal.write(data)
            owner = terminal.connection_id
        await self.connections.touch(owner)

    async def read_terminal(self, terminal_id: str) -> str:
        async with self.terminals.acquire(terminal_id) as terminal:
            output = terminal.read()
            owner = terminal.connection_id
        await self.connections.touch(owner)
        return output

    async def resize_terminal(self, terminal_id: str, cols: int, rows: int) -> None:
        async with self.terminals.acquire(terminal_id) as terminal:
            terminal.resize(TerminalSize.clamped(cols, rows))

    async def close_terminal(self, terminal_id: str) -> None:
        await self.terminals.close(terminal_id)

    async def shutdown(self) -> None:
        """Close every terminal and connection."""
        await self.terminals.close_all()
        await self.connections.close_all()
