"""Terminal data models."""

from dataclasses import dataclass
from enum import Enum

TERM_TYPE = "xterm-256color"
MIN_COLS = 20
MIN_ROWS = 5


class TerminalState(Enum):
    """Lifecycle of a terminal channel."""

    CREATED = "created"
    INTERACTIVE = "interactive"
    CLOSED = "closed"


@dataclass(frozen=True)
class TerminalSize:
    """Terminal geometry, clamped to a usable minimum."""

    cols: int
    rows: int

    @classmethod
    def clamped(cls, cols: int, rows: int) -> "TerminalSize":
        """Raise requested dimensions to at least 20 columns by 5 rows."""
        return cls(cols=max(cols, MIN_COLS), rows=max(rows, MIN_ROWS))
