"""
cvd_lens.core.logging — stderr logging for the cvd-lens CLI.

The library itself only creates module loggers; ``configure_logging`` is for
entry points.  Stdout carries report output, so records go to stderr.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# Chatty per-request loggers from the HTTP stack
_QUIET_LOGGERS = ("httpx", "httpcore")

_installed = False


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> None:
    """Install the stderr handler and set the root level.

    ``level`` wins over ``LOG_LEVEL``; unknown names fall back to INFO.
    Only the first call has any effect.
    """
    global _installed
    if _installed:
        return

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _installed = True


def reset_logging_for_tests() -> None:
    global _installed
    _installed = False
