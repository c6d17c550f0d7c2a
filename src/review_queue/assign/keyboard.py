"""Escape key detection on an interactive terminal."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TextIO

logger = logging.getLogger(__name__)

ESCAPE = b"\x1b"


def is_escape(data: bytes) -> bool:
    """A lone ESC byte; escape sequences such as arrow keys do not count."""

    return data == ESCAPE


@contextmanager
def escape_key_listener(
    loop: asyncio.AbstractEventLoop,
    on_escape: Callable[[], object],
    *,
    stream: TextIO | None = None,
) -> Iterator[bool]:
    """Put the terminal in cbreak mode and call ``on_escape`` when ESC is pressed.

    Yields False (and does nothing) when stdin is not a TTY or the platform
    has no termios. Ctrl+C keeps generating SIGINT in cbreak mode.
    """

    stream = stream or sys.stdin
    if sys.platform == "win32" or not stream.isatty():
        yield False
        return

    import termios  # noqa: PLC0415
    import tty  # noqa: PLC0415

    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    tty.setcbreak(fd)

    def _on_readable() -> None:
        try:
            data = os.read(fd, 32)
        except OSError as error:
            logger.debug("stdin read failed: %s", error)
            return
        if is_escape(data):
            on_escape()

    loop.add_reader(fd, _on_readable)
    try:
        yield True
    finally:
        loop.remove_reader(fd)
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        except termios.error:
            logger.debug("Could not restore terminal settings", exc_info=True)
