"""
Terminal display surface and keyboard listener.
"""

import curses
import logging
import os
import select
import sys
import threading
from abc import ABC, abstractmethod
from contextlib import suppress
from typing import Callable, Optional

from .models import Style
from ..exceptions import DisplaySurfaceError

logger = logging.getLogger(__name__)


class DisplaySurface(ABC):
    """Cell-addressed text output with styles and an explicit commit."""

    @abstractmethod
    def write(self, x: int, y: int, text: str, style: Style = Style.DEFAULT) -> None:
        """Write text starting at column x, row y."""

    @abstractmethod
    def clear(self) -> None:
        """Blank the surface."""

    @abstractmethod
    def flush(self) -> None:
        """Make everything written since the last flush visible."""

    @abstractmethod
    def close(self) -> None:
        """Release the surface. Calling it more than once is harmless."""


class CursesSurface(DisplaySurface):
    """Display surface backed by curses on the controlling terminal."""

    _PAIRS = {
        Style.DEFAULT: (1, curses.COLOR_WHITE),
        Style.POSITIVE: (2, curses.COLOR_GREEN),
        Style.NEGATIVE: (3, curses.COLOR_RED),
    }
    _FALLBACK_ATTRS = {
        Style.DEFAULT: curses.A_NORMAL,
        Style.POSITIVE: curses.A_BOLD,
        Style.NEGATIVE: curses.A_UNDERLINE,
    }

    def __init__(self, stream=None):
        self._stream = stream if stream is not None else sys.stdin
        self._screen = None
        self._colors = False

    @property
    def is_open(self) -> bool:
        return self._screen is not None

    def open(self) -> "CursesSurface":
        """
        Take over the terminal.

        Raises:
            DisplaySurfaceError: If there is no terminal or curses cannot start
        """
        if not self._stream.isatty():
            raise DisplaySurfaceError("Standard input is not a terminal")

        try:
            screen = curses.initscr()
        except curses.error as e:
            raise DisplaySurfaceError(f"Unable to initialize terminal: {e}") from e

        try:
            curses.noecho()
            curses.cbreak()
            with suppress(curses.error):
                curses.curs_set(0)
            if curses.has_colors():
                curses.start_color()
                background = -1
                try:
                    curses.use_default_colors()
                except curses.error:
                    background = curses.COLOR_BLACK
                for pair, foreground in self._PAIRS.values():
                    curses.init_pair(pair, foreground, background)
                self._colors = True
        except curses.error as e:
            curses.endwin()
            raise DisplaySurfaceError(f"Unable to configure terminal: {e}") from e

        screen.erase()
        screen.refresh()
        self._screen = screen
        logger.debug(f"Terminal opened (colors={self._colors})")
        return self

    def _attr(self, style: Style) -> int:
        if self._colors:
            return curses.color_pair(self._PAIRS[style][0])
        return self._FALLBACK_ATTRS[style]

    def write(self, x: int, y: int, text: str, style: Style = Style.DEFAULT) -> None:
        if self._screen is None:
            raise DisplaySurfaceError("Terminal is not open")
        try:
            self._screen.addstr(y, x, text, self._attr(style))
        except curses.error:
            # addstr fails when text runs past the bottom-right cell
            logger.debug(f"Row {y} does not fit the terminal")

    def clear(self) -> None:
        if self._screen is not None:
            self._screen.erase()

    def flush(self) -> None:
        if self._screen is not None:
            self._screen.refresh()

    def close(self) -> None:
        if self._screen is None:
            return
        self._screen = None
        with suppress(curses.error):
            curses.nocbreak()
            curses.echo()
        curses.endwin()
        logger.debug("Terminal closed")


class KeyListener:
    """Background thread that reports the first keypress on a stream."""

    def __init__(self, on_key: Callable[[], None], stream=None, poll_interval: float = 0.2):
        """
        Args:
            on_key: Called once, from the listener thread, when a key arrives
            stream: Input stream with a file descriptor; defaults to stdin
            poll_interval: Seconds between checks for a stop request
        """
        self._on_key = on_key
        self._stream = stream if stream is not None else sys.stdin
        self._poll_interval = poll_interval
        self._halt = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "KeyListener":
        self._thread = threading.Thread(target=self._run, name="key-listener", daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        self._halt.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self._poll_interval * 5)

    def _run(self) -> None:
        fd = self._stream.fileno()
        while not self._halt.is_set():
            ready, _, _ = select.select([fd], [], [], self._poll_interval)
            if not ready:
                continue
            data = os.read(fd, 32)
            if not data:
                # EOF on the input stream, nothing more will arrive
                return
            logger.debug("Key pressed")
            self._on_key()
            return
