"""Dependency injection container for sshdesk.

The server owns one container; tools reach it through their request
context instead of module-level state.
"""

from dataclasses import dataclass

from sshdesk.config import Settings
from sshdesk.services.connections import ConnectionRegistry
from sshdesk.services.manager import SessionManager
from sshdesk.services.terminals import TerminalRegistry


@dataclass
class Dependencies:
    """Container for sshdesk dependencies.

    Example:
        deps = Dependencies.create()
        info = await deps.manager.create_connection(request)
    """

    config: Settings
    connections: ConnectionRegistry
    terminals: TerminalRegistry
    manager: SessionManager

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies from environment settings."""
        return cls.from_settings(Settings.from_env())

    @classmethod
    def from_settings(cls, config: Settings) -> "Dependencies":
        """Create dependencies with custom settings.

        Args:
            config: Custom Settings instance

        Returns:
            Dependencies with registries initialized from settings
        """
        connections = ConnectionRegistry(
            keepalive_interval=config.keepalive_interval,
            connect_timeout=config.connect_timeout,
            known_hosts=config.known_hosts_path,
        )
        terminals = TerminalRegistry(buffer_limit=config.terminal_buffer_limit)
        manager = SessionManager(
            connections,
            terminals,
            transfer_chunk_size=config.transfer_chunk_size,
        )
        return cls(
            config=config,
            connections=connections,
            terminals=terminals,
            manager=manager,
        )

    async def cleanup(self) -> None:
        """Clean up resources (close all terminals and connections)."""
        await self.manager.shutdown()
