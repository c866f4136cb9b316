"""Configuration for SUBWAY DASH."""

from .settings import Settings, TerminalSettings, get_settings

__all__ = ["Settings", "TerminalSettings", "get_settings"]
