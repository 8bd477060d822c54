"""Console log formatting for sshdesk.

Lines look like::

    14:02:11.083 | INFO  | connections | + SSH connection established: 3f9c2a1e (alice@db)

Connection and terminal ids are uuid4 strings; the console shows only their
first eight hex digits so lines stay readable.
"""

import logging
import re
import time

RESET = "\033[0m"
DIM = "\033[2m"

LEVEL_STYLES = {
    logging.DEBUG: "\033[90m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;37;41m",
}

# Longest prefix wins
COMPONENT_STYLES = {
    "sshdesk.services.connections": "\033[35m",
    "sshdesk.services.terminals": "\033[34m",
    "sshdesk.services.sftp": "\033[36m",
    "sshdesk.services": "\033[96m",
    "sshdesk.middleware": "\033[93m",
    "sshdesk": "\033[37m",
}

# Lifecycle markers, checked in order against the lowercased message
MARKERS = [
    (("starting", "ready"), "\033[92m", ">"),
    (("shutting down", "shutdown complete"), "\033[91m", "<"),
    (("failed", "error"), "\033[91m", "!"),
    (("established", "started", "opening"), "\033[96m", "+"),
    (("closing", "closed", "removing"), "\033[93m", "-"),
]

UUID_PATTERN = re.compile(
    r"\b([0-9a-f]{8})-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\b"
)
TARGET_PATTERN = re.compile(r"\b[\w.\-]+@[\w.\-]+(?::\d+)?")
DURATION_PATTERN = re.compile(r"\b\d+(?:\.\d+)?ms\b(?: SLOW!)?")


def short_ids(message: str) -> str:
    """Abbreviate uuid4 ids to their first eight hex digits."""
    return UUID_PATTERN.sub(r"\1", message)


class ConsoleFormatter(logging.Formatter):
    """Single-line formatter with optional ANSI colors."""

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def _paint(self, text: str, style: str) -> str:
        if not self.use_colors or not style:
            return text
        return f"{style}{text}{RESET}"

    @staticmethod
    def _component(name: str) -> tuple[str, str]:
        """Short component label and its style for a logger name."""
        style = ""
        for prefix in sorted(COMPONENT_STYLES, key=len, reverse=True):
            if name == prefix or name.startswith(prefix + "."):
                style = COMPONENT_STYLES[prefix]
                break
        label = name.rsplit(".", 1)[-1] if name.startswith("sshdesk.") else name
        return label, style

    @staticmethod
    def _marker(message: str) -> tuple[str, str]:
        lowered = message.lower()
        for words, style, symbol in MARKERS:
            if any(word in lowered for word in words):
                return symbol, style
        return " ", ""

    def _highlight(self, message: str) -> str:
        if not self.use_colors:
            return message
        message = TARGET_PATTERN.sub(lambda m: self._paint(m.group(0), "\033[95m"), message)
        return DURATION_PATTERN.sub(lambda m: self._paint(m.group(0), "\033[93m"), message)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        clock = time.strftime("%H:%M:%S", time.localtime(record.created))
        return f"{clock}.{int(record.msecs):03d}"

    def format(self, record: logging.LogRecord) -> str:
        message = short_ids(record.getMessage())
        label, component_style = self._component(record.name)
        symbol, marker_style = self._marker(message)
        sep = self._paint("|", DIM)

        line = " ".join(
            [
                self._paint(self.formatTime(record), DIM),
                sep,
                self._paint(f"{record.levelname:<5}", LEVEL_STYLES.get(record.levelno, "")),
                sep,
                self._paint(f"{label:<12}", component_style),
                sep,
                self._paint(symbol, marker_style),
                self._highlight(message),
            ]
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line
