"""Base middleware class for sshdesk."""

import logging

from fastmcp.server.middleware import Middleware


class DeskMiddleware(Middleware):
    """Middleware that logs under its own module's logger unless given one."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(type(self).__module__)
