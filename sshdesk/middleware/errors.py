"""Error logging middleware.

Session failures (a missing id, a rejected password, a dropped transport)
are part of normal operation and are logged at WARNING with their stable
code. Anything that is not an :class:`SSHDeskError` is a bug and is logged
at ERROR, with a traceback when enabled.
"""

import logging
from collections import Counter
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from sshdesk.middleware.base import DeskMiddleware
from sshdesk.services.errors import SSHDeskError


def domain_error(exc: BaseException) -> SSHDeskError | None:
    """The session error behind ``exc``, if any.

    Tools re-raise session errors as ToolError, so the cause is checked too.
    """
    for candidate in (exc, exc.__cause__):
        if isinstance(candidate, SSHDeskError):
            return candidate
    return None


def error_key(exc: BaseException) -> str:
    """Statistics key: the stable code for session errors, else the type name."""
    domain = domain_error(exc)
    return domain.code if domain is not None else type(exc).__name__


class ErrorHandlingMiddleware(DeskMiddleware):
    """Logs and counts failed requests, then re-raises.

    Example:
        >>> mcp.add_middleware(ErrorHandlingMiddleware(include_traceback=True))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
    ) -> None:
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self._counts: Counter[str] = Counter()

    def get_error_stats(self) -> dict[str, int]:
        """Failure counts keyed by error code or exception type."""
        return dict(self._counts)

    def reset_stats(self) -> None:
        self._counts.clear()

    async def on_message(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        try:
            return await call_next(context)
        except Exception as e:
            key = error_key(e)
            self._counts[key] += 1

            if domain_error(e) is not None:
                self.logger.warning("%s rejected [%s]: %s", context.method, key, e)
            else:
                self.logger.error(
                    "Unexpected %s in %s: %s",
                    key,
                    context.method,
                    e,
                    exc_info=self.include_traceback,
                )
            raise
