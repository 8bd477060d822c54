"""Utility modules for sshdesk."""

from sshdesk.utils.console import ConsoleFormatter, short_ids

__all__ = ["ConsoleFormatter", "short_ids"]
