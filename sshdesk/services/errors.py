"""Error taxonomy for session operations.

Every fallible operation raises a subclass of :class:`SSHDeskError`. Each
carries a stable ``code`` so callers can branch on the failure kind while
still showing the human-readable message.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import asyncssh


class SSHDeskError(Exception):
    """Base class for all session layer failures."""

    code = "error"


class TransportIOError(SSHDeskError):
    """Socket, channel stream or local file system failure."""

    code = "io"

    def __init__(self, detail: object):
        super().__init__(f"I/O error: {detail}")


class SSHProtocolError(SSHDeskError):
    """SSH library level failure."""

    code = "ssh"

    def __init__(self, detail: object):
        super().__init__(f"SSH error: {detail}")


class ConnectionNotFoundError(SSHDeskError):
    """No live connection with the given id."""

    code = "connection_not_found"

    def __init__(self, connection_id: str):
        self.connection_id = connection_id
        super().__init__(f"Connection not found: {connection_id}")


class TerminalNotFoundError(SSHDeskError):
    """No live terminal with the given id."""

    code = "terminal_not_found"

    def __init__(self, terminal_id: str):
        self.terminal_id = terminal_id
        super().__init__(f"Terminal not found: {terminal_id}")


class AuthenticationFailedError(SSHDeskError):
    """The server rejected the supplied credentials."""

    code = "auth_failed"

    def __init__(self, detail: object | None = None):
        message = "Authentication failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidInputError(SSHDeskError):
    """A required field was blank or internal state is unusable."""

    code = "invalid_input"

    def __init__(self, detail: str):
        super().__init__(f"Invalid input: {detail}")


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise library exceptions as :class:`SSHDeskError` subclasses.

    Domain errors pass through untouched. Order matters: asyncssh's
    ``PermissionDenied`` is itself an ``asyncssh.Error``. A wrong passphrase
    on an OpenSSH-format key surfaces as ``KeyEncryptionError``, which is a
    ``ValueError`` rather than a ``KeyImportError``.
    """
    try:
        yield
    except SSHDeskError:
        raise
    except (
        asyncssh.PermissionDenied,
        asyncssh.KeyImportError,
        asyncssh.KeyEncryptionError,
    ) as e:
        raise AuthenticationFailedError(e) from e
    except asyncssh.Error as e:
        raise SSHProtocolError(e) from e
    except OSError as e:
        raise TransportIOError(e) from e
