"""
Terminal screen for SUBWAY DASH.

Thin wrapper over the controlling terminal: raw mode, alternate screen,
cursor visibility, size queries and byte output. Holds no game logic.
"""

import logging
import os
import shutil
import sys
from typing import BinaryIO, Optional, TextIO, Tuple

logger = logging.getLogger(__name__)

ALT_SCREEN_ON = b"\x1b[?1049h"
ALT_SCREEN_OFF = b"\x1b[?1049l"
HIDE_CURSOR = b"\x1b[?25l"
SHOW_CURSOR = b"\x1b[?25h"
CLEAR = b"\x1b[2J"

READ_CHUNK = 32


class TerminalScreen:
    """
    The real terminal.

    enter() switches stdin to raw mode and the output to the alternate
    screen; exit() undoes both and is safe to call more than once.
    """

    def __init__(
        self,
        fallback: Tuple[int, int] = (80, 24),
        stdin: Optional[TextIO] = None,
        stdout: Optional[BinaryIO] = None,
    ) -> None:
        self._fallback = fallback
        self._stdin = stdin or sys.stdin
        self._out = stdout or sys.stdout.buffer
        self._saved_attrs = None
        self._entered = False

    def __enter__(self) -> "TerminalScreen":
        self.enter()
        return self

    def __exit__(self, *exc_info) -> None:
        self.exit()

    def input_fd(self) -> Optional[int]:
        """Descriptor to watch for key presses, None without a TTY."""
        try:
            fd = self._stdin.fileno()
        except (AttributeError, ValueError, OSError):
            return None
        return fd if os.isatty(fd) else None

    def enter(self) -> None:
        if self._entered:
            return
        # From here on exit() must undo whatever part of enter() succeeded
        self._entered = True

        fd = self.input_fd()
        if fd is not None:
            import termios
            import tty

            try:
                self._saved_attrs = termios.tcgetattr(fd)
                tty.setraw(fd)
            except termios.error as e:
                logger.warning(f"Could not enter raw mode: {e}")
                self._saved_attrs = None
        else:
            logger.warning("stdin is not a terminal, keyboard input disabled")

        self.write(ALT_SCREEN_ON + HIDE_CURSOR + CLEAR)
        logger.debug("Terminal screen entered")

    def exit(self) -> None:
        if not self._entered:
            return
        self._entered = False

        try:
            self.write(SHOW_CURSOR + ALT_SCREEN_OFF)
        finally:
            if self._saved_attrs is not None:
                import termios

                fd = self._stdin.fileno()
                termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_attrs)
                self._saved_attrs = None
        logger.debug("Terminal screen restored")

    def size(self) -> Tuple[int, int]:
        """Current (width, height) in cells."""
        size = shutil.get_terminal_size(self._fallback)
        return size.columns, size.lines

    def write(self, data: bytes) -> None:
        self._out.write(data)
        self._out.flush()

    def clear(self) -> None:
        self.write(CLEAR)

    def show_title(self, text: str) -> None:
        """Centre a line of text on the top row."""
        width, _ = self.size()
        column = max(1, (width - len(text)) // 2)
        self.write(f"\x1b[1;{column}H{text}".encode("ascii", "replace"))

    def read_keys(self) -> bytes:
        """Read whatever key bytes are pending; empty on EOF."""
        fd = self.input_fd()
        if fd is None:
            return b""
        return os.read(fd, READ_CHUNK)
