"""Interactive terminal tools.

Terminals are polled: call terminal_read repeatedly, an empty string just
means no new output yet.
"""

from typing import Any

from fastmcp import Context

from sshdesk.tools.context import get_manager, tool_errors


async def start_terminal(
    ctx: Context,
    connection_id: str,
    cols: int = 80,
    rows: int = 24,
) -> dict[str, Any]:
    """Start an interactive xterm-256color shell.

    Sizes below 20 columns or 5 rows are raised to that minimum.

    Returns:
        {"terminalId": ...}
    """
    with tool_errors():
        terminal_id = await get_manager(ctx).start_terminal(connection_id, cols, rows)
    return {"terminalId": terminal_id}


async def terminal_write(ctx: Context, terminal_id: str, data: str) -> None:
    """Send keystrokes to a terminal."""
    with tool_errors():
        await get_manager(ctx).write_terminal(terminal_id, data)


async def terminal_read(ctx: Context, terminal_id: str) -> str:
    """Return output produced since the last read, possibly empty."""
    with tool_errors():
        return await get_manager(ctx).read_terminal(terminal_id)


async def terminal_resize(ctx: Context, terminal_id: str, cols: int, rows: int) -> None:
    """Change a terminal's size."""
    with tool_errors():
        await get_manager(ctx).resize_terminal(terminal_id, cols, rows)


async def close_terminal(ctx: Context, terminal_id: str) -> None:
    """Close a terminal."""
    with tool_errors():
        await get_manager(ctx).close_terminal(terminal_id)
