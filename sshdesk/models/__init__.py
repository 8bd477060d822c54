"""Data models for sshdesk."""

from sshdesk.models.command import CommandResult
from sshdesk.models.connection import (
    AuthMethod,
    ConnectionInfo,
    ConnectRequest,
    PasswordAuth,
    PrivateKeyAuth,
    parse_auth,
)
from sshdesk.models.sftp import DirectoryEntry, TransferResult, kind_from_mode
from sshdesk.models.terminal import TerminalSize, TerminalState

__all__ = [
    "AuthMethod",
    "CommandResult",
    "ConnectionInfo",
    "ConnectRequest",
    "DirectoryEntry",
    "PasswordAuth",
    "PrivateKeyAuth",
    "TerminalSize",
    "TerminalState",
    "TransferResult",
    "kind_from_mode",
    "parse_auth",
]
