"""Connection, command and keepalive tools."""

from typing import Any

from fastmcp import Context
from fastmcp.exceptions import ToolError

from sshdesk.models import ConnectRequest, parse_auth
from sshdesk.tools.context import get_manager, tool_errors


async def create_connection(
    ctx: Context,
    host: str,
    username: str,
    auth: dict[str, Any],
    port: int = 22,
    label: str | None = None,
) -> dict[str, Any]:
    """Open and authenticate an SSH connection.

    Args:
        host: Remote host name or address.
        username: Login user.
        auth: Either {"kind": "password", "password": "..."} or
            {"kind": "privateKey", "privateKeyPath": "...", "passphrase": "..."}.
            The passphrase is optional.
        port: SSH port (default: 22).
        label: Display name; defaults to username@host.

    Returns:
        Connection info including the new connection id.
    """
    try:
        auth_method = parse_auth(auth)
    except ValueError as e:
        raise ToolError(f"[invalid_input] Invalid input: {e}") from e

    request = ConnectRequest(
        host=host,
        username=username,
        auth=auth_method,
        port=port,
        label=label,
    )
    with tool_errors():
        info = await get_manager(ctx).create_connection(request)
    return info.to_dict()


async def list_connections(ctx: Context) -> list[dict[str, Any]]:
    """List live connections, most recently connected first."""
    with tool_errors():
        infos = await get_manager(ctx).list_connections()
    return [info.to_dict() for info in infos]


async def close_connection(ctx: Context, connection_id: str) -> None:
    """Close a connection and every terminal running on it."""
    with tool_errors():
        await get_manager(ctx).close_connection(connection_id)


async def run_command(ctx: Context, connection_id: str, command: str) -> dict[str, Any]:
    """Run one command to completion.

    Returns:
        {"stdout": ..., "stderr": ..., "exitCode": ...}
    """
    with tool_errors():
        result = await get_manager(ctx).run_command(connection_id, command)
    return result.to_dict()


async def send_keepalive(ctx: Context, connection_id: str) -> dict[str, Any]:
    """Send a liveness probe.

    Returns:
        {"secondsToNext": seconds until the next probe is due}
    """
    with tool_errors():
        seconds = await get_manager(ctx).send_keepalive(connection_id)
    return {"secondsToNext": seconds}
