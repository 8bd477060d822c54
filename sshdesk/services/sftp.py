"""SFTP directory listing and file transfer."""

import logging
import posixpath
from typing import TYPE_CHECKING

from sshdesk.models import DirectoryEntry, TransferResult, kind_from_mode
from sshdesk.services.errors import SSHDeskError, translate_errors

if TYPE_CHECKING:
    import asyncssh

logger = logging.getLogger(__name__)


def _to_entry(directory: str, name: "asyncssh.SFTPName") -> DirectoryEntry:
    filename = name.filename
    if isinstance(filename, bytes):
        filename = filename.decode("utf-8", errors="replace")

    entry = DirectoryEntry(
        name=filename,
        path=posixpath.join(directory, filename),
        kind=kind_from_mode(name.attrs.permissions),
    )
    # Without mode bits the other attributes are not trusted either
    if name.attrs.permissions is not None:
        entry.size = name.attrs.size
        entry.permissions = name.attrs.permissions
        entry.modified_at = name.attrs.mtime
    return entry


async def list_dir(
    conn: "asyncssh.SSHClientConnection",
    path: str,
) -> list[DirectoryEntry]:
    """List a remote directory in server order.

    Args:
        conn: SSH connection to open the SFTP session on
        path: Remote directory; blank means the login directory

    Returns:
        One entry per name the server returned, including '.' and '..'.
    """
    directory = path.strip() or "."

    with translate_errors():
        async with conn.start_sftp_client() as sftp:
            names = await sftp.readdir(directory)

    return [_to_entry(directory, name) for name in names]


async def upload_file(
    conn: "asyncssh.SSHClientConnection",
    local_path: str,
    remote_path: str,
    chunk_size: int = 32_768,
) -> TransferResult:
    """Copy a local file to the remote host.

    A failure part way through leaves the partial remote file in place.

    Returns:
        TransferResult with the number of bytes copied.
    """
    source, destination = local_path.strip(), remote_path.strip()
    copied = 0
    opened = False

    try:
        with translate_errors():
            with open(source, "rb") as local_file:
                async with conn.start_sftp_client() as sftp:
                    async with sftp.open(destination, "wb") as remote_file:
                        opened = True
                        while chunk := local_file.read(chunk_size):
                            await remote_file.write(chunk)
                            copied += len(chunk)
    except SSHDeskError:
        if opened:
            logger.warning(
                "Upload to %s failed after %d bytes, partial file left in place",
                destination,
                copied,
            )
        raise

    logger.info("Uploaded %s -> %s (%d bytes)", source, destination, copied)
    return TransferResult(source=source, destination=destination, bytes_transferred=copied)


async def download_file(
    conn: "asyncssh.SSHClientConnection",
    remote_path: str,
    local_path: str,
    chunk_size: int = 32_768,
) -> TransferResult:
    """Copy a remote file to local storage.

    A failure part way through leaves the partial local file in place.

    Returns:
        TransferResult with the number of bytes copied.
    """
    source, destination = remote_path.strip(), local_path.strip()
    copied = 0
    opened = False

    try:
        with translate_errors():
            async with conn.start_sftp_client() as sftp:
                async with sftp.open(source, "rb") as remote_file:
                    with open(destination, "wb") as local_file:
                        opened = True
                        while chunk := await remote_file.read(chunk_size):
                            local_file.write(chunk)
                            copied += len(chunk)
                        local_file.flush()
    except SSHDeskError:
        if opened:
            logger.warning(
                "Download to %s failed after %d bytes, partial file left in place",
                destination,
                copied,
            )
        raise

    logger.info("Downloaded %s -> %s (%d bytes)", source, destination, copied)
    return TransferResult(source=source, destination=destination, bytes_transferred=copied)
