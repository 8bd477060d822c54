"""Tests for dependency injection container."""

import pytest

from sshdesk.config import Settings
from sshdesk.dependencies import Dependencies
from sshdesk.services import ConnectionRegistry, SessionManager, TerminalRegistry


class TestDependencies:
    """Test Dependencies container."""

    def test_create_initializes_everything(self):
        """Dependencies.create() wires registries and manager together."""
        deps = Dependencies.create()

        assert isinstance(deps.config, Settings)
        assert isinstance(deps.connections, ConnectionRegistry)
        assert isinstance(deps.terminals, TerminalRegistry)
        assert isinstance(deps.manager, SessionManager)
        assert deps.manager.connections is deps.connections
        assert deps.manager.terminals is deps.terminals

    def test_from_settings_uses_provided_values(self):
        settings = Settings(
            keepalive_interval=12,
            connect_timeout=7,
            transfer_chunk_size=1024,
            terminal_buffer_limit=4096,
        )

        deps = Dependencies.from_settings(settings)

        assert deps.config is settings
        assert deps.connections.keepalive_interval == 12
        assert deps.connections.connect_timeout == 7
        assert deps.terminals.buffer_limit == 4096
        assert deps.manager.transfer_chunk_size == 1024

    def test_containers_are_independent(self):
        first = Dependencies.from_settings(Settings())
        second = Dependencies.from_settings(Settings())

        assert first.connections is not second.connections

    @pytest.mark.asyncio
    async def test_cleanup_shuts_registries_down(self):
        deps = Dependencies.from_settings(Settings())

        await deps.cleanup()

        assert deps.connections.size == 0
        assert deps.terminals.size == 0
