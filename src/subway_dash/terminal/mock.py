"""
Headless screen for tests and non-interactive runs.

Mirrors the TerminalScreen interface but only records what it is given.
"""

from typing import List, Optional, Tuple


class MockScreen:
    """Records frames instead of drawing them."""

    def __init__(self, width: int = 80, height: int = 24) -> None:
        self._size = (width, height)
        self.frames: List[bytes] = []
        self.titles: List[str] = []
        self.clears = 0
        self.entered = False
        self.exited = False

    def __enter__(self) -> "MockScreen":
        self.enter()
        return self

    def __exit__(self, *exc_info) -> None:
        self.exit()

    def input_fd(self) -> Optional[int]:
        return None

    def enter(self) -> None:
        self.entered = True

    def exit(self) -> None:
        self.exited = True

    def set_size(self, width: int, height: int) -> None:
        """Simulate the user resizing the terminal."""
        self._size = (width, height)

    def size(self) -> Tuple[int, int]:
        return self._size

    def write(self, data: bytes) -> None:
        self.frames.append(data)

    def clear(self) -> None:
        self.clears += 1

    def show_title(self, text: str) -> None:
        self.titles.append(text)

    def read_keys(self) -> bytes:
        return b""

    @property
    def last_frame(self) -> Optional[bytes]:
        return self.frames[-1] if self.frames else None
