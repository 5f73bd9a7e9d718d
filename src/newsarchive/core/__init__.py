# src/newsarchive/core/__init__.py
"""Core infrastructure: Configuration, Logging, Archive storage, Retention."""

from newsarchive.core.config import (
    ArchiveSettings,
    BackupSettings,
    DatabaseSettings,
    LoggingSettings,
    PurgeSettings,
    load_settings,
)
from newsarchive.core.logging import (
    configure_logging,
    get_logger,
)

__all__ = [
    "ArchiveSettings",
    "BackupSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "PurgeSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
]
