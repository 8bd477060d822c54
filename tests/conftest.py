"""Shared fixtures: fake asyncssh connections and a wired session manager."""

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from sshdesk.services import ConnectionRegistry, SessionManager, TerminalRegistry


def make_channel() -> MagicMock:
    """A fake SSH channel with the methods terminals call."""
    chan = MagicMock()
    chan.wait_closed = AsyncMock()
    return chan


def make_connection() -> MagicMock:
    """A fake asyncssh.SSHClientConnection.

    create_session builds the session through the real factory and attaches
    a fresh fake channel, the way asyncssh does.
    """
    conn = MagicMock()
    conn.wait_closed = AsyncMock()
    conn.is_closed = MagicMock(return_value=False)
    conn.channels = []

    def create_session(factory, **kwargs):
        chan = make_channel()
        session = factory()
        session.connection_made(chan)
        conn.channels.append(chan)
        return chan, session

    conn.create_session = AsyncMock(side_effect=create_session)
    return conn


@pytest.fixture
def connection_factory() -> Callable[[], MagicMock]:
    return make_connection


@pytest.fixture
def manager() -> SessionManager:
    """A session manager over empty registries."""
    connections = ConnectionRegistry(keepalive_interval=30)
    terminals = TerminalRegistry(buffer_limit=1024)
    return SessionManager(connections, terminals, transfer_chunk_size=4)
