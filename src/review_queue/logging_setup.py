"""Logging configuration for the interactive assign session."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(*, log_path: Path | None, level: str = "INFO") -> None:
    """Route logs to a file when configured, otherwise only errors to stderr.

    The dashboard redraws the whole terminal every cycle, so anything below
    ERROR on stderr would be wiped out immediately anyway.
    """

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(str(log_path), encoding="utf-8")
        handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.ERROR)
    handler.setFormatter(formatter)

    root.setLevel(logging.DEBUG)
    root.addHandler(handler)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.captureWarnings(True)
