"""Logging middleware for tool calls.

One line when a tool is called and one when it returns or fails:

    >>> TOOL run_command(connection_id='3f9c...', command='uptime')
    <<< TOOL run_command: exitCode=0, 54 chars out [212.4ms]

Arguments are redacted before they are formatted, so credentials and
terminal keystrokes never reach a handler.
"""

import json
import logging
import time
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from sshdesk.middleware.base import DeskMiddleware

REDACTED = "***"
SENSITIVE_KEYS = frozenset({"password", "passphrase", "data"})

# Polled in a tight loop by clients; logged at DEBUG unless slow
POLLING_TOOLS = frozenset({"terminal_read", "send_keepalive"})

MAX_ARG_LENGTH = 60


def redact(value: Any) -> Any:
    """Replace credentials and terminal keystrokes with a placeholder."""
    if isinstance(value, dict):
        return {
            k: REDACTED if k in SENSITIVE_KEYS else redact(v) for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def describe_args(args: dict[str, Any] | None) -> str:
    """Render call arguments as ``(key=value, ...)`` after redaction."""
    rendered = []
    for key, value in redact(args or {}).items():
        text = repr(value)
        if len(text) > MAX_ARG_LENGTH:
            text = text[: MAX_ARG_LENGTH - 3] + "..."
        rendered.append(f"{key}={text}")
    return f"({', '.join(rendered)})"


def summarize(result: Any) -> str:
    """Short description of a tool result."""
    # fastmcp wraps tool return values in a ToolResult
    payload = getattr(result, "structured_content", result)
    if isinstance(payload, dict) and set(payload) == {"result"}:
        payload = payload["result"]

    if payload is None:
        return "ok"
    if isinstance(payload, str):
        return f"{len(payload)} chars"
    if isinstance(payload, list):
        return f"{len(payload)} entries"
    if isinstance(payload, dict):
        if "exitCode" in payload:
            return f"exitCode={payload['exitCode']}, {len(payload.get('stdout', ''))} chars out"
        if "bytesTransferred" in payload:
            return f"{payload['bytesTransferred']} bytes"
        for key in ("terminalId", "id", "secondsToNext"):
            if key in payload:
                return f"{key}={payload[key]}"
        return f"{len(payload)} keys"
    return type(result).__name__


class LoggingMiddleware(DeskMiddleware):
    """Logs each tool call with redacted arguments, duration and outcome.

    Example:
        >>> mcp.add_middleware(LoggingMiddleware(slow_threshold_ms=500))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_payloads: bool = False,
        max_payload_length: int = 1000,
        slow_threshold_ms: float = 1000.0,
    ) -> None:
        """Initialize logging middleware.

        Args:
            logger: Optional custom logger.
            include_payloads: Also log full (redacted) arguments and results
                at DEBUG.
            max_payload_length: Payload dumps are cut at this many characters.
            slow_threshold_ms: Calls at least this slow are logged at WARNING.
        """
        super().__init__(logger=logger)
        self.include_payloads = include_payloads
        self.max_payload_length = max_payload_length
        self.slow_threshold_ms = slow_threshold_ms

    def _dump(self, payload: Any) -> str:
        text = json.dumps(payload, default=str)
        if len(text) <= self.max_payload_length:
            return text
        return f"{text[: self.max_payload_length]}... ({len(text)} chars)"

    def _completion_level(self, tool_name: str, elapsed_ms: float) -> int:
        if elapsed_ms >= self.slow_threshold_ms:
            return logging.WARNING
        return logging.DEBUG if tool_name in POLLING_TOOLS else logging.INFO

    async def on_call_tool(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        """Log the call, then its result or failure with elapsed time."""
        tool_name = getattr(context.message, "name", "unknown")
        args = getattr(context.message, "arguments", None)
        call_level = logging.DEBUG if tool_name in POLLING_TOOLS else logging.INFO

        self.logger.log(call_level, ">>> TOOL %s%s", tool_name, describe_args(args))
        if self.include_payloads and args:
            self.logger.debug("    args: %s", self._dump(redact(args)))

        started = time.monotonic()
        try:
            result = await call_next(context)
        except Exception as e:
            elapsed_ms = (time.monotonic() - started) * 1000
            self.logger.error(
                "!!! TOOL %s failed: %s [%.1fms]", tool_name, e, elapsed_ms
            )
            raise

        elapsed_ms = (time.monotonic() - started) * 1000
        level = self._completion_level(tool_name, elapsed_ms)
        self.logger.log(
            level,
            "<<< TOOL %s: %s [%.1fms%s]",
            tool_name,
            summarize(result),
            elapsed_ms,
            " SLOW!" if level == logging.WARNING else "",
        )
        if self.include_payloads and result is not None:
            payload = getattr(result, "structured_content", result)
            self.logger.debug("    result: %s", self._dump(payload))
        return result
