"""One-shot remote command execution."""

from typing import TYPE_CHECKING

from sshdesk.models import CommandResult
from sshdesk.services.errors import translate_errors

if TYPE_CHECKING:
    import asyncssh


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


async def run_command(
    conn: "asyncssh.SSHClientConnection",
    command: str,
) -> CommandResult:
    """Run a command on its own channel and wait for it to finish.

    The channel is opened for this call only and closed before returning.
    Both output streams are read to end-of-stream.

    Returns:
        CommandResult with stdout, stderr, and exit code (0 if the server
        reported none).
    """
    with translate_errors():
        result = await conn.run(command, check=False, encoding=None)

    exit_code = result.exit_status if result.exit_status is not None else 0

    return CommandResult(
        stdout=_decode(result.stdout),
        stderr=_decode(result.stderr),
        exit_code=exit_code,
    )
