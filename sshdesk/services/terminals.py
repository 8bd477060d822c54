"""Interactive PTY terminals polled by repeated read calls.

A terminal never blocks its caller. Incoming channel data is delivered by
asyncssh into per-stream buffers on :class:`TerminalSession`; a read drains
whatever is buffered and returns immediately, with an empty string meaning
nothing is available yet. Each channel buffers independently, so opening a
terminal changes nothing for other channels on the same connection.

When unread output grows past the buffer limit, channel reading is paused
so the SSH window applies back pressure to the remote shell. The next
drain resumes it.
"""

import asyncio
import codecs
import logging
import uuid
from collections import deque
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import asyncssh

from sshdesk.models import TerminalSize, TerminalState
from sshdesk.models.terminal import TERM_TYPE
from sshdesk.services.errors import (
    InvalidInputError,
    TerminalNotFoundError,
    TransportIOError,
    translate_errors,
)

logger = logging.getLogger(__name__)

STDOUT = None
STDERR = asyncssh.EXTENDED_DATA_STDERR


class TerminalSession(asyncssh.SSHClientSession[bytes]):
    """Buffers channel output until the next poll."""

    def __init__(self, buffer_limit: int = 1_048_576) -> None:
        self.buffer_limit = buffer_limit
        self._chan: "asyncssh.SSHClientChannel[bytes] | None" = None
        self._buffers: dict[int | None, deque[bytes]] = {
            STDOUT: deque(),
            STDERR: deque(),
        }
        self._buffered = 0
        self._paused = False
        self.eof = False
        self.closed = False
        self.error: Exception | None = None

    def connection_made(self, chan: "asyncssh.SSHClientChannel[bytes]") -> None:
        self._chan = chan

    def data_received(self, data: bytes, datatype: int | None) -> None:
        stream = STDOUT if datatype is None else STDERR
        self._buffers[stream].append(data)
        self._buffered += len(data)

        if self._buffered >= self.buffer_limit and not self._paused and self._chan:
            logger.debug(
                "Terminal buffer full (%d bytes), pausing channel reads",
                self._buffered,
            )
            self._chan.pause_reading()
            self._paused = True

    def eof_received(self) -> bool:
        self.eof = True
        return False

    def connection_lost(self, exc: Exception | None) -> None:
        self.closed = True
        self.error = exc

    @property
    def buffered(self) -> int:
        return self._buffered

    def drain(self, stream: int | None) -> bytes:
        """Take everything buffered on one stream.

        Loops until the buffer is empty, the equivalent of reading a
        non-blocking stream until it would block.
        """
        queue = self._buffers[stream]
        data = bytearray()
        while queue:
            data.extend(queue.popleft())
        self._buffered -= len(data)
        return bytes(data)

    def resume(self) -> None:
        """Resume channel reads paused by a full buffer."""
        if self._paused and self._chan and self._buffered < self.buffer_limit:
            self._paused = False
            self._chan.resume_reading()


def _decoder() -> codecs.IncrementalDecoder:
    return codecs.getincrementaldecoder("utf-8")(errors="replace")


@dataclass
class TerminalChannel:
    """One interactive shell channel, tagged with its owning connection."""

    id: str
    connection_id: str
    size: TerminalSize
    state: TerminalState = TerminalState.CREATED
    channel: Any = None
    session: TerminalSession | None = None
    _decoders: dict[int | None, codecs.IncrementalDecoder] = field(
        default_factory=lambda: {STDOUT: _decoder(), STDERR: _decoder()},
        repr=False,
    )

    async def open(
        self,
        conn: asyncssh.SSHClientConnection,
        buffer_limit: int,
    ) -> None:
        """Request a PTY, start a shell and switch to polled I/O."""
        with translate_errors():
            chan, session = await conn.create_session(
                lambda: TerminalSession(buffer_limit),
                term_type=TERM_TYPE,
                term_size=(self.size.cols, self.size.rows),
                encoding=None,
            )
        self.channel = chan
        self.session = session
        self.state = TerminalState.INTERACTIVE

    def _require_interactive(self) -> TerminalSession:
        if self.state is not TerminalState.INTERACTIVE or self.session is None:
            raise InvalidInputError(f"terminal {self.id} is {self.state.value}")
        return self.session

    def write(self, data: str) -> None:
        """Send input to the shell. asyncssh flushes to the wire at once."""
        self._require_interactive()
        with translate_errors():
            self.channel.write(data.encode("utf-8"))

    def read(self) -> str:
        """Drain stdout then stderr and return the decoded text.

        Returns:
            Whatever output is available, possibly an empty string.

        Raises:
            TransportIOError: If the channel failed and nothing is buffered.
        """
        session = self._require_interactive()
        final = session.closed
        stdout = self._decoders[STDOUT].decode(session.drain(STDOUT), final)
        stderr = self._decoders[STDERR].decode(session.drain(STDERR), final)
        session.resume()

        if not stdout and not stderr and session.error is not None:
            raise TransportIOError(session.error)
        return stdout + stderr

    def resize(self, size: TerminalSize) -> None:
        self._require_interactive()
        with translate_errors():
            self.channel.change_terminal_size(size.cols, size.rows)
        self.size = size

    async def close(self) -> None:
        """Close the channel and wait for the peer's acknowledgement.

        Failures are logged and otherwise ignored.
        """
        previous = self.state
        self.state = TerminalState.CLOSED
        if previous is not TerminalState.INTERACTIVE or self.channel is None:
            return
        try:
            self.channel.close()
            await self.channel.wait_closed()
        except Exception as e:
            logger.debug("Ignoring error while closing terminal %s: %s", self.id, e)


class TerminalRegistry:
    """Mapping of terminal id to :class:`TerminalChannel`."""

    def __init__(self, buffer_limit: int = 1_048_576) -> None:
        self.buffer_limit = buffer_limit
        self._terminals: dict[str, TerminalChannel] = {}
        self._lock = asyncio.Lock()

    async def open(
        self,
        connection_id: str,
        conn: asyncssh.SSHClientConnection,
        cols: int,
        rows: int,
    ) -> TerminalChannel:
        """Open a shell on a connection and register it."""
        terminal = TerminalChannel(
            id=str(uuid.uuid4()),
            connection_id=connection_id,
            size=TerminalSize.clamped(cols, rows),
        )
        await terminal.open(conn, self.buffer_limit)

        async with self._lock:
            self._terminals[terminal.id] = terminal

        logger.info(
            "Terminal %s started on connection %s (%dx%d)",
            terminal.id,
            connection_id,
            terminal.size.cols,
            terminal.size.rows,
        )
        return terminal

    @asynccontextmanager
    async def acquire(self, terminal_id: str) -> AsyncIterator[TerminalChannel]:
        """Hold the registry lock while working on one terminal.

        Raises:
            TerminalNotFoundError: If no terminal has this id
        """
        async with self._lock:
            terminal = self._terminals.get(terminal_id)
            if terminal is None:
                raise TerminalNotFoundError(terminal_id)
            yield terminal

    async def close(self, terminal_id: str) -> None:
        """Unregister a terminal, then close its channel best-effort.

        Raises:
            TerminalNotFoundError: If no terminal has this id
        """
        async with self._lock:
            terminal = self._terminals.pop(terminal_id, None)
        if terminal is None:
            raise TerminalNotFoundError(terminal_id)

        logger.info("Closing terminal %s", terminal_id)
        await terminal.close()

    async def close_for_connection(self, connection_id: str) -> int:
        """Close every terminal owned by a connection.

        Returns:
            Number of terminals closed
        """
        async with self._lock:
            owned = [
                t for t in self._terminals.values() if t.connection_id == connection_id
            ]
            for terminal in owned:
                del self._terminals[terminal.id]

        for terminal in owned:
            await terminal.close()

        if owned:
            logger.info(
                "Closed %d terminal(s) of connection %s",
                len(owned),
                connection_id,
            )
        return len(owned)

    async def close_all(self) -> None:
        async with self._lock:
            terminals = list(self._terminals.values())
            self._terminals.clear()
        for terminal in terminals:
            await terminal.close()

    @property
    def size(self) -> int:
        return len(self._terminals)
