"""sshdesk: MCP server for SSH connections, commands, SFTP and terminals."""

__version__ = "0.1.0"
