"""Tests for the error taxonomy and library error translation."""

import asyncssh
import pytest

from sshdesk.services.errors import (
    AuthenticationFailedError,
    ConnectionNotFoundError,
    InvalidInputError,
    SSHProtocolError,
    TerminalNotFoundError,
    TransportIOError,
    translate_errors,
)


def test_messages_and_codes() -> None:
    assert str(TransportIOError("broken pipe")) == "I/O error: broken pipe"
    assert str(SSHProtocolError("kex failed")) == "SSH error: kex failed"
    assert str(ConnectionNotFoundError("c1")) == "Connection not found: c1"
    assert str(TerminalNotFoundError("t1")) == "Terminal not found: t1"
    assert str(AuthenticationFailedError()) == "Authentication failed"
    assert str(InvalidInputError("x")) == "Invalid input: x"

    assert TransportIOError.code == "io"
    assert SSHProtocolError.code == "ssh"
    assert ConnectionNotFoundError.code == "connection_not_found"
    assert TerminalNotFoundError.code == "terminal_not_found"
    assert AuthenticationFailedError.code == "auth_failed"
    assert InvalidInputError.code == "invalid_input"


def test_permission_denied_becomes_auth_failed() -> None:
    with pytest.raises(AuthenticationFailedError) as exc_info:
        with translate_errors():
            raise asyncssh.PermissionDenied("Permission denied")

    assert isinstance(exc_info.value.__cause__, asyncssh.PermissionDenied)


def test_key_import_error_becomes_auth_failed() -> None:
    with pytest.raises(AuthenticationFailedError):
        with translate_errors():
            raise asyncssh.KeyImportError("Passphrase must be specified")


def test_other_asyncssh_errors_become_ssh_errors() -> None:
    with pytest.raises(SSHProtocolError, match="^SSH error: "):
        with translate_errors():
            raise asyncssh.ConnectionLost("Connection lost")


def test_os_errors_become_io_errors() -> None:
    with pytest.raises(TransportIOError, match="^I/O error: "):
        with translate_errors():
            raise ConnectionRefusedError("refused")


def test_domain_errors_pass_through() -> None:
    original = InvalidInputError("command cannot be empty")
    with pytest.raises(InvalidInputError) as exc_info:
        with translate_errors():
            raise original

    assert exc_info.value is original


def test_unrelated_errors_propagate_untouched() -> None:
    with pytest.raises(KeyError):
        with translate_errors():
            raise KeyError("nope")


def test_wrong_key_passphrase_becomes_auth_failed() -> None:
    with pytest.raises(AuthenticationFailedError, match="Incorrect passphrase"):
        with translate_errors():
            raise asyncssh.KeyEncryptionError("Incorrect passphrase")
