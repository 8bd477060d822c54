"""Shared plumbing for tool functions."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from fastmcp import Context
from fastmcp.exceptions import ToolError

from sshdesk.services.errors import SSHDeskError

if TYPE_CHECKING:
    from sshdesk.dependencies import Dependencies
    from sshdesk.services.manager import SessionManager


def get_deps(ctx: Context) -> "Dependencies":
    """Dependencies attached to the server handling this request."""
    deps: Dependencies = ctx.fastmcp.deps  # type: ignore[attr-defined]
    return deps


def get_manager(ctx: Context) -> "SessionManager":
    return get_deps(ctx).manager


@contextmanager
def tool_errors() -> Iterator[None]:
    """Turn domain errors into a ToolError carrying code and message."""
    try:
        yield
    except SSHDeskError as e:
        raise ToolError(f"[{e.code}] {e}") from e
