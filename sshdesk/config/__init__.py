"""Configuration module for sshdesk."""

from sshdesk.config.settings import Settings

__all__ = ["Settings"]
