"""Terminal harness: screen access and the fixed-rate runner."""

from .mock import MockScreen
from .runner import TerminalRunner
from .screen import TerminalScreen

__all__ = ["MockScreen", "TerminalRunner", "TerminalScreen"]
