"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
They configure the terminal harness only; gameplay tuning is fixed in the
engine and projection modules.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TerminalSettings(BaseSettings):
    """Terminal and frame scheduling settings."""

    model_config = SettingsConfigDict(env_prefix="SUBWAY_DASH_TERMINAL_", extra="ignore")

    # Scheduling
    fps: int = Field(default=20, ge=1, le=240)
    max_delta: float = Field(default=0.1, gt=0.0)  # dt clamp after stalls

    # Used when the terminal size cannot be queried
    fallback_width: int = Field(default=80, ge=1)
    fallback_height: int = Field(default=24, ge=1)

    # Title splash shown before the first frame
    title: str = "SUBWAY DASH - press q to quit"
    title_duration: float = Field(default=1.0, ge=0.0)

    @property
    def frame_time(self) -> float:
        return 1.0 / self.fps


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SUBWAY_DASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = False

    # The terminal belongs to the game while it runs, so logs go to a file
    log_file: Optional[Path] = None

    # Seed for spawn lanes; None draws from system entropy
    seed: Optional[int] = None

    # Nested settings
    terminal: TerminalSettings = Field(default_factory=TerminalSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
