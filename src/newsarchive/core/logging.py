# src/newsarchive/core/logging.py
"""Structured logging setup.

structlog renders events through stdlib logging handlers, so library
logs (SQLAlchemy, etc.) and our own events share one configuration:
- Console: colored, human-readable (all environments except production,
  which falls back to it when no log directory is set)
- File: rotating, key=value lines (all environments except development,
  when a log directory is set)
"""

import logging
import logging.handlers
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from newsarchive.core.config import LoggingSettings

# Marker so reconfiguration only replaces handlers installed here
_HANDLER_MARKER = "_newsarchive_handler"

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
    structlog.processors.StackInfoRenderer(),
]


def configure_logging(settings: "LoggingSettings") -> None:
    """Configure structlog and the root stdlib logger.

    Safe to call more than once; previously installed handlers are replaced.

    Args:
        settings: Validated logging settings
    """
    level = getattr(logging, settings.effective_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = []

    # Production uses the console only when no log directory is set
    if settings.environment != "production" or settings.log_dir is None:
        console = logging.StreamHandler()
        console.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=_SHARED_PROCESSORS,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.dev.ConsoleRenderer(colors=True),
                ],
            )
        )
        handlers.append(console)

    if settings.environment != "development" and settings.log_dir is not None:
        log_dir = settings.log_dir.resolve()
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{settings.app_name}.log",
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.max_files,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=_SHARED_PROCESSORS,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.KeyValueRenderer(
                        key_order=["timestamp", "level", "event"]
                    ),
                ],
            )
        )
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _HANDLER_MARKER, True)
        handler.setLevel(level)
        root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger, optionally named.

    Loggers are lazy proxies: they pick up configuration applied after
    they were created.
    """
    return structlog.get_logger(name)
