"""SFTP tools."""

from typing import Any

from fastmcp import Context

from sshdesk.tools.context import get_manager, tool_errors


async def sftp_list_dir(
    ctx: Context,
    connection_id: str,
    path: str = "",
) -> list[dict[str, Any]]:
    """List a remote directory.

    Args:
        connection_id: Connection to list on.
        path: Remote directory; empty lists the login directory.

    Returns:
        Entries with name, path, kind (dir/file/symlink/unknown), size,
        permissions and modifiedAt.
    """
    with tool_errors():
        entries = await get_manager(ctx).list_dir(connection_id, path)
    return [entry.to_dict() for entry in entries]


async def sftp_upload(
    ctx: Context,
    connection_id: str,
    local_path: str,
    remote_path: str,
) -> dict[str, Any]:
    """Upload a local file to the remote host."""
    with tool_errors():
        result = await get_manager(ctx).upload(connection_id, local_path, remote_path)
    return result.to_dict()


async def sftp_download(
    ctx: Context,
    connection_id: str,
    remote_path: str,
    local_path: str,
) -> dict[str, Any]:
    """Download a remote file to local storage."""
    with tool_errors():
        result = await get_manager(ctx).download(connection_id, remote_path, local_path)
    return result.to_dict()
