"""sshdesk middleware components."""

from sshdesk.middleware.base import DeskMiddleware
from sshdesk.middleware.errors import ErrorHandlingMiddleware
from sshdesk.middleware.logging import LoggingMiddleware

__all__ = [
    "DeskMiddleware",
    "ErrorHandlingMiddleware",
    "LoggingMiddleware",
]
