"""Configuration management using Pydantic Settings.

Only the ``argbind`` console script and the CLI error boundary read these
settings.  The library core takes everything it needs as explicit
arguments.
"""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``ARGBIND_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ARGBIND_",
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_format: Literal["json", "console"] = "console"

    # Diagnostics
    show_usage: bool = True


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
