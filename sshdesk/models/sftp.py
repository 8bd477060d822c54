"""SFTP data models."""

import stat
from dataclasses import dataclass
from typing import Any

_KINDS = {
    stat.S_IFDIR: "dir",
    stat.S_IFREG: "file",
    stat.S_IFLNK: "symlink",
}


def kind_from_mode(mode: int | None) -> str:
    """Classify a file by the type bits of its mode.

    Returns:
        'dir', 'file', 'symlink', or 'unknown' (also for missing mode).
    """
    if mode is None:
        return "unknown"
    return _KINDS.get(stat.S_IFMT(mode), "unknown")


@dataclass
class DirectoryEntry:
    """One entry of a remote directory listing."""

    name: str
    path: str
    kind: str
    size: int | None = None
    permissions: int | None = None
    modified_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "kind": self.kind,
            "size": self.size,
            "permissions": self.permissions,
            "modifiedAt": self.modified_at,
        }


@dataclass
class TransferResult:
    """Result of a file upload or download."""

    source: str
    destination: str
    bytes_transferred: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "destination": self.destination,
            "bytesTransferred": self.bytes_transferred,
        }
