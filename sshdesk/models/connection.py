"""Connection data models."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


@dataclass
class PasswordAuth:
    """Password authentication."""

    password: str


@dataclass
class PrivateKeyAuth:
    """Private key file authentication with optional passphrase."""

    private_key_path: str
    passphrase: str | None = None


AuthMethod = PasswordAuth | PrivateKeyAuth


def parse_auth(data: dict[str, Any]) -> AuthMethod:
    """Build an auth method from its tagged wire form.

    Accepts ``{"kind": "password", "password": ...}`` or
    ``{"kind": "privateKey", "privateKeyPath": ..., "passphrase": ...}``.

    Raises:
        ValueError: If the kind is unknown or a required field is missing.
    """
    kind = data.get("kind")
    if kind == "password":
        if "password" not in data:
            raise ValueError("password auth requires 'password'")
        return PasswordAuth(password=str(data["password"]))
    if kind == "privateKey":
        key_path = data.get("privateKeyPath")
        if key_path is None:
            raise ValueError("privateKey auth requires 'privateKeyPath'")
        passphrase = data.get("passphrase")
        return PrivateKeyAuth(
            private_key_path=str(key_path),
            passphrase=str(passphrase) if passphrase is not None else None,
        )
    raise ValueError(f"unknown auth kind: {kind!r}")


@dataclass
class ConnectRequest:
    """Parameters for opening a new connection."""

    host: str
    username: str
    auth: AuthMethod
    port: int = 22
    label: str | None = None

    @property
    def display_label(self) -> str:
        """Caller's label, or ``username@host`` when blank."""
        if self.label and self.label.strip():
            return self.label
        return f"{self.username}@{self.host}"


@dataclass
class ConnectionInfo:
    """Public view of a live connection."""

    id: str
    label: str
    host: str
    port: int
    username: str
    connected_at: datetime = field(default_factory=utc_now)
    last_active_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "connectedAt": self.connected_at.isoformat(),
            "lastActiveAt": self.last_active_at.isoformat(),
        }
