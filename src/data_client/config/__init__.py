"""Configuration for data-client: settings and logging."""

from .settings import DataClientSettings, get_settings, reset_settings
from .logging_config import (
    LogLevel,
    LogVerbosity,
    LogFormat,
    LoggingConfig,
    setup_logging,
)

__all__ = [
    "DataClientSettings",
    "get_settings",
    "reset_settings",
    "LogLevel",
    "LogVerbosity",
    "LogFormat",
    "LoggingConfig",
    "setup_logging",
]
