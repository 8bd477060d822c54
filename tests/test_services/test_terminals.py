"""Tests for interactive terminals."""

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock, patch

import asyncssh
import pytest

from sshdesk.models import ConnectRequest, PasswordAuth, TerminalSize, TerminalState
from sshdesk.services import (
    ConnectionNotFoundError,
    InvalidInputError,
    SessionManager,
    SSHProtocolError,
    TerminalChannel,
    TerminalNotFoundError,
    TerminalSession,
    TransportIOError,
)


async def open_connection(manager: SessionManager, conn: MagicMock) -> str:
    request = ConnectRequest(host="h", username="u", auth=PasswordAuth("pw"))
    with patch("asyncssh.connect", new_callable=AsyncMock, return_value=conn):
        info = await manager.create_connection(request)
    return info.id


@pytest.fixture
def conn(connection_factory: Callable[[], MagicMock]) -> MagicMock:
    return connection_factory()


def session_of(manager: SessionManager, terminal_id: str) -> TerminalSession:
    return manager.terminals._terminals[terminal_id].session


@pytest.mark.asyncio
async def test_start_terminal_clamps_size(manager: SessionManager, conn: MagicMock) -> None:
    connection_id = await open_connection(manager, conn)

    terminal_id = await manager.start_terminal(connection_id, 1, 1)

    assert terminal_id
    kwargs = conn.create_session.call_args.kwargs
    assert kwargs["term_type"] == "xterm-256color"
    assert kwargs["term_size"] == (20, 5)
    assert kwargs["encoding"] is None


@pytest.mark.asyncio
async def test_start_terminal_keeps_requested_size(
    manager: SessionManager, conn: MagicMock
) -> None:
    connection_id = await open_connection(manager, conn)

    await manager.start_terminal(connection_id, 132, 43)

    assert conn.create_session.call_args.kwargs["term_size"] == (132, 43)


@pytest.mark.asyncio
async def test_start_terminal_unknown_connection(manager: SessionManager) -> None:
    with pytest.raises(ConnectionNotFoundError):
        await manager.start_terminal("nope", 80, 24)


@pytest.mark.asyncio
async def test_start_terminal_channel_refused(manager: SessionManager, conn: MagicMock) -> None:
    connection_id = await open_connection(manager, conn)
    conn.create_session.side_effect = asyncssh.ChannelOpenError(
        1, "no shells"  # administratively prohibited
    )

    with pytest.raises(SSHProtocolError):
        await manager.start_terminal(connection_id, 80, 24)
    assert manager.terminals.size == 0


@pytest.mark.asyncio
async def test_read_with_no_output_returns_empty(
    manager: SessionManager, conn: MagicMock
) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)

    assert await manager.read_terminal(terminal_id) == ""


@pytest.mark.asyncio
async def test_read_drains_stdout_then_stderr(
    manager: SessionManager, conn: MagicMock
) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)
    session = session_of(manager, terminal_id)

    session.data_received(b"err!", asyncssh.EXTENDED_DATA_STDERR)
    session.data_received(b"$ ls\n", None)
    session.data_received(b"a b c\n", None)

    assert await manager.read_terminal(terminal_id) == "$ ls\na b c\nerr!"
    assert await manager.read_terminal(terminal_id) == ""


@pytest.mark.asyncio
async def test_read_keeps_split_utf8_sequences(
    manager: SessionManager, conn: MagicMock
) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)
    session = session_of(manager, terminal_id)

    session.data_received("caf".encode() + b"\xc3", None)
    assert await manager.read_terminal(terminal_id) == "caf"

    session.data_received(b"\xa9", None)
    assert await manager.read_terminal(terminal_id) == "é"


@pytest.mark.asyncio
async def test_read_replaces_invalid_bytes(manager: SessionManager, conn: MagicMock) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)
    session = session_of(manager, terminal_id)

    session.data_received(b"ok\xff\n", None)

    assert await manager.read_terminal(terminal_id) == "ok\ufffd\n"


@pytest.mark.asyncio
async def test_read_after_channel_failure(manager: SessionManager, conn: MagicMock) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)
    session = session_of(manager, terminal_id)

    session.data_received(b"bye\n", None)
    session.connection_lost(ConnectionResetError("reset by peer"))

    assert await manager.read_terminal(terminal_id) == "bye\n"
    with pytest.raises(TransportIOError, match="reset by peer"):
        await manager.read_terminal(terminal_id)


@pytest.mark.asyncio
async def test_read_after_clean_exit_returns_empty(
    manager: SessionManager, conn: MagicMock
) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)
    session = session_of(manager, terminal_id)

    session.eof_received()
    session.connection_lost(None)

    assert await manager.read_terminal(terminal_id) == ""


@pytest.mark.asyncio
async def test_write_sends_utf8(manager: SessionManager, conn: MagicMock) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)

    await manager.write_terminal(terminal_id, "echo é\n")

    conn.channels[0].write.assert_called_once_with("echo é\n".encode())


@pytest.mark.asyncio
async def test_write_unknown_terminal(manager: SessionManager) -> None:
    with pytest.raises(TerminalNotFoundError, match="ghost"):
        await manager.write_terminal("ghost", "ls\n")


@pytest.mark.asyncio
async def test_read_unknown_terminal(manager: SessionManager) -> None:
    with pytest.raises(TerminalNotFoundError):
        await manager.read_terminal("ghost")


@pytest.mark.asyncio
async def test_resize_clamps(manager: SessionManager, conn: MagicMock) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)

    await manager.resize_terminal(terminal_id, 10, 2)
    await manager.resize_terminal(terminal_id, 120, 40)

    chan = conn.channels[0]
    assert [c.args for c in chan.change_terminal_size.call_args_list] == [
        (20, 5),
        (120, 40),
    ]


@pytest.mark.asyncio
async def test_resize_unknown_terminal(manager: SessionManager) -> None:
    with pytest.raises(TerminalNotFoundError):
        await manager.resize_terminal("ghost", 80, 24)


@pytest.mark.asyncio
async def test_close_terminal_then_unknown(manager: SessionManager, conn: MagicMock) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)

    await manager.close_terminal(terminal_id)

    conn.channels[0].close.assert_called_once()
    with pytest.raises(TerminalNotFoundError):
        await manager.close_terminal(terminal_id)
    with pytest.raises(TerminalNotFoundError):
        await manager.read_terminal(terminal_id)


@pytest.mark.asyncio
async def test_close_terminal_swallows_channel_errors(
    manager: SessionManager, conn: MagicMock
) -> None:
    connection_id = await open_connection(manager, conn)
    terminal_id = await manager.start_terminal(connection_id, 80, 24)
    conn.channels[0].wait_closed.side_effect = asyncssh.ConnectionLost("gone")

    await manager.close_terminal(terminal_id)

    assert manager.terminals.size == 0


@pytest.mark.asyncio
async def test_terminal_activity_touches_owner(
    manager: SessionManager, conn: MagicMock
) -> None:
    connection_id = await open_connection(manager, conn)
    before = (await manager.list_connections())[0].last_active_at
    terminal_id = await manager.start_terminal(connection_id, 80, 24)

    await manager.write_terminal(terminal_id, "x")

    after = (await manager.list_connections())[0].last_active_at
    assert after >= before


class TestTerminalSession:
    """Tests for buffering and back pressure."""

    def test_pauses_when_buffer_full_and_resumes_after_drain(self) -> None:
        chan = MagicMock()
        session = TerminalSession(buffer_limit=8)
        session.connection_made(chan)

        session.data_received(b"1234", None)
        chan.pause_reading.assert_not_called()

        session.data_received(b"5678", None)
        chan.pause_reading.assert_called_once()

        session.data_received(b"9", None)
        chan.pause_reading.assert_called_once()

        assert session.drain(None) == b"123456789"
        session.resume()
        chan.resume_reading.assert_called_once()
        assert session.buffered == 0

    def test_resume_without_pause_does_nothing(self) -> None:
        chan = MagicMock()
        session = TerminalSession(buffer_limit=8)
        session.connection_made(chan)

        session.resume()

        chan.resume_reading.assert_not_called()

    def test_eof_keeps_channel_open(self) -> None:
        session = TerminalSession()
        assert session.eof_received() is False
        assert session.eof is True


@pytest.mark.asyncio
async def test_write_after_close_is_invalid(connection_factory: Callable[[], MagicMock]) -> None:

    terminal = TerminalChannel(id="t", connection_id="c", size=TerminalSize(80, 24))
    await terminal.open(connection_factory(), buffer_limit=1024)
    assert terminal.state is TerminalState.INTERACTIVE

    await terminal.close()

    assert terminal.state is TerminalState.CLOSED
    with pytest.raises(InvalidInputError, match="closed"):
        terminal.write("ls\n")
