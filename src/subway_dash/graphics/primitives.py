"""Bounds-checked drawing primitives for character row buffers.

A frame is a numpy uint8 array of shape (height, width) holding one ASCII
byte per cell. Every writer here clips to [0, width) so callers can pass
columns computed from perspective math without checking them first.
"""

from typing import Union

import numpy as np
from numpy.typing import NDArray

# Type aliases
Row = NDArray[np.uint8]
Frame = NDArray[np.uint8]
Glyph = Union[str, int]

BLANK = ord(" ")


def new_frame(width: int, height: int) -> Frame:
    """Allocate a blank frame."""
    return np.full((height, width), BLANK, dtype=np.uint8)


def _code(glyph: Glyph) -> int:
    return glyph if isinstance(glyph, int) else ord(glyph)


def put_char(row: Row, x: int, glyph: Glyph) -> None:
    """Write one cell, ignoring columns outside the row."""
    if 0 <= x < row.shape[0]:
        row[x] = _code(glyph)


def put_text(row: Row, x: int, text: str) -> None:
    """Write a string starting at x; cells falling off either edge are clipped."""
    w = row.shape[0]
    start = max(0, x)
    end = min(w, x + len(text))
    if start >= end:
        return
    data = text[start - x:end - x].encode("ascii", "replace")
    row[start:end] = np.frombuffer(data, dtype=np.uint8)


def fill_span(row: Row, x1: int, x2: int, glyph: Glyph) -> None:
    """Fill the inclusive span [x1, x2], clamped to the row."""
    start = max(0, x1)
    end = min(row.shape[0], x2 + 1)
    if start < end:
        row[start:end] = _code(glyph)


def replace_in_span(row: Row, x1: int, x2: int, old: Glyph, new: Glyph) -> None:
    """Replace cells equal to old with new inside the inclusive span [x1, x2]."""
    start = max(0, x1)
    end = min(row.shape[0], x2 + 1)
    if start >= end:
        return
    span = row[start:end]
    span[span == _code(old)] = _code(new)


def fill_pattern(row: Row, glyph: Glyph, period: int, phase: int) -> None:
    """Set every cell whose (column + phase) is a multiple of period."""
    columns = np.arange(row.shape[0])
    row[(columns + phase) % period == 0] = _code(glyph)
