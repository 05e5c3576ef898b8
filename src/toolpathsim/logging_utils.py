"""Logging setup for the command line."""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "WARNING", stream: Optional[IO[str]] = None) -> None:
    """Configure root logging.

    Args:
        level: Log level name (e.g., INFO, DEBUG); unknown names mean WARNING.
        stream: Output stream; defaults to stderr so report output stays clean.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    if not isinstance(log_level, int):
        log_level = logging.WARNING
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=log_level, handlers=[handler], force=True)
