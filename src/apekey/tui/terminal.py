"""Terminal back-ends for the viewer.

``Terminal`` is the small surface the TUI draws on. ``ProcessTerminal`` puts
the controlling tty in raw mode for the lifetime of one viewer session and
hands every key sequence read from stdin to the TUI.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from apekey.tui.keys import split_input

logger = logging.getLogger(__name__)

_ENTER_ALT_SCREEN = "\x1b[?1049h"
_LEAVE_ALT_SCREEN = "\x1b[?1049l"
_PASTE_ON = "\x1b[?2004h"
_PASTE_OFF = "\x1b[?2004l"
_CURSOR_OFF = "\x1b[?25l"
_CURSOR_ON = "\x1b[?25h"

_FALLBACK_SIZE = os.terminal_size((80, 24))
_READ_SIZE = 4096


class Terminal(Protocol):
    """What the TUI needs from a terminal."""

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...


class ProcessTerminal:
    """The process's own tty.

    ``start`` must be called from inside a running event loop: stdin is
    watched with ``loop.add_reader`` and SIGWINCH with
    ``loop.add_signal_handler``. ``stop`` undoes every change ``start`` made,
    in reverse order.
    """

    def __init__(self, alternate_screen: bool = True) -> None:
        self.alternate_screen = alternate_screen
        self._on_input: Callable[[str], None] | None = None
        self._on_resize: Callable[[], None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._saved_mode: list | None = None
        # keeps a multi-byte character split across two reads intact
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def _size(self) -> os.terminal_size:
        try:
            return os.get_terminal_size(sys.stdout.fileno())
        except (ValueError, OSError):
            return _FALLBACK_SIZE

    @property
    def columns(self) -> int:
        return self._size().columns

    @property
    def rows(self) -> int:
        return self._size().lines

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        self._on_input = on_input
        self._on_resize = on_resize
        self._loop = asyncio.get_running_loop()

        stdin_fd = sys.stdin.fileno()
        self._saved_mode = termios.tcgetattr(stdin_fd)
        tty.setraw(stdin_fd)

        self.write((_ENTER_ALT_SCREEN if self.alternate_screen else "") + _PASTE_ON)

        self._loop.add_signal_handler(signal.SIGWINCH, self._handle_resize)
        self._loop.add_reader(stdin_fd, self._read_stdin)
        logger.debug("terminal started, %dx%d", self.columns, self.rows)

    def stop(self) -> None:
        if self._loop is not None:
            try:
                self._loop.remove_reader(sys.stdin.fileno())
                self._loop.remove_signal_handler(signal.SIGWINCH)
            except (RuntimeError, ValueError):
                logger.debug("event loop closed before the terminal was stopped")
            self._loop = None

        self.write(_PASTE_OFF + _CURSOR_ON + (_LEAVE_ALT_SCREEN if self.alternate_screen else ""))

        if self._saved_mode is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._saved_mode)
            self._saved_mode = None

        self._on_input = None
        self._on_resize = None

    def write(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError as e:
            logger.debug("terminal write failed: %s", e)

    def hide_cursor(self) -> None:
        self.write(_CURSOR_OFF)

    def show_cursor(self) -> None:
        self.write(_CURSOR_ON)

    def _handle_resize(self) -> None:
        if self._on_resize is not None:
            self._on_resize()

    def _read_stdin(self) -> None:
        try:
            raw = os.read(sys.stdin.fileno(), _READ_SIZE)
        except OSError as e:
            logger.debug("stdin read failed: %s", e)
            return
        if not raw or self._on_input is None:
            return
        for sequence in split_input(self._decoder.decode(raw)):
            self._on_input(sequence)
