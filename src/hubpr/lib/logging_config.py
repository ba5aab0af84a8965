"""Logging setup for the hubpr CLI.

Diagnostics go to stderr so that stdout carries nothing but the pull
request URL (or the dry-run request dump) and can be piped.
"""

import logging
import sys
from datetime import datetime, timezone


class CliFormatter(logging.Formatter):
    """Formatter that produces short, timestamped lines for terminal output."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%H:%M:%S")
        level = record.levelname.ljust(7)
        return f"[{record.name}] {timestamp} {level} {record.getMessage()}"


def setup_logging(verbose: bool = False) -> None:
    """Configure root logger for CLI output.

    Args:
        verbose: If True, set level to DEBUG. Otherwise WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(CliFormatter())
    handler.setLevel(level)
    root.addHandler(handler)
