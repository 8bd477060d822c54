"""Services for sshdesk."""

from sshdesk.services.connections import ConnectionHandle, ConnectionRegistry
from sshdesk.services.errors import (
    AuthenticationFailedError,
    ConnectionNotFoundError,
    InvalidInputError,
    SSHDeskError,
    SSHProtocolError,
    TerminalNotFoundError,
    TransportIOError,
    translate_errors,
)
from sshdesk.services.executors import run_command
from sshdesk.services.keepalive import send_keepalive
from sshdesk.services.manager import SessionManager
from sshdesk.services.sftp import download_file, list_dir, upload_file
from sshdesk.services.terminals import TerminalChannel, TerminalRegistry, TerminalSession

__all__ = [
    "AuthenticationFailedError",
    "ConnectionHandle",
    "ConnectionNotFoundError",
    "ConnectionRegistry",
    "InvalidInputError",
    "SSHDeskError",
    "SSHProtocolError",
    "SessionManager",
    "TerminalChannel",
    "TerminalNotFoundError",
    "TerminalRegistry",
    "TerminalSession",
    "TransportIOError",
    "download_file",
    "list_dir",
    "run_command",
    "send_keepalive",
    "translate_errors",
    "upload_file",
]
