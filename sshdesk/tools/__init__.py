"""MCP tools for sshdesk."""

from sshdesk.tools.connections import (
    close_connection,
    create_connection,
    list_connections,
    run_command,
    send_keepalive,
)
from sshdesk.tools.sftp import sftp_download, sftp_list_dir, sftp_upload
from sshdesk.tools.terminal import (
    close_terminal,
    start_terminal,
    terminal_read,
    terminal_resize,
    terminal_write,
)

ALL_TOOLS = [
    create_connection,
    list_connections,
    close_connection,
    run_command,
    send_keepalive,
    sftp_list_dir,
    sftp_upload,
    sftp_download,
    start_terminal,
    terminal_write,
    terminal_read,
    terminal_resize,
    close_terminal,
]

__all__ = [
    "ALL_TOOLS",
    "close_connection",
    "close_terminal",
    "create_connection",
    "list_connections",
    "run_command",
    "send_keepalive",
    "sftp_download",
    "sftp_list_dir",
    "sftp_upload",
    "start_terminal",
    "terminal_read",
    "terminal_resize",
    "terminal_write",
]
