"""
Process-wide loguru configuration for agentcore.

Configuration via .env file:
- LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- LOG_MODE: development (colored stderr) or production (rotated files)
- LOG_DIR: Log directory for production (default: logs)
- LOG_ROTATION: Rotation size or interval (e.g., "10 MB", "1 day")
- LOG_RETENTION: Retention time (e.g., "7 days")
- LOG_COMPRESSION: Compression format for rotated files (e.g., "zip")
"""

import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_MODE = "development"
DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_ROTATION = "10 MB"
DEFAULT_LOG_RETENTION = "7 days"
DEFAULT_LOG_COMPRESSION = "zip"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | "
    "{extra[name]}:{function}:{line} - {message}"
)


class LoggerManager:
    """Singleton owning the loguru sinks."""

    _instance: Optional["LoggerManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "LoggerManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if LoggerManager._initialized:
            return
        LoggerManager._initialized = True

        self.log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
        self.log_mode = os.getenv("LOG_MODE", DEFAULT_LOG_MODE).lower()
        self.log_dir = Path(os.getenv("LOG_DIR", DEFAULT_LOG_DIR))
        self.log_rotation = os.getenv("LOG_ROTATION", DEFAULT_LOG_ROTATION)
        self.log_retention = os.getenv("LOG_RETENTION", DEFAULT_LOG_RETENTION)
        self.log_compression = os.getenv("LOG_COMPRESSION", DEFAULT_LOG_COMPRESSION)

        self._handler_ids: list[int] = []
        self._configure()

    def _configure(self) -> None:
        # Records logged without get_logger() still need extra[name]
        logger.configure(extra={"name": "root"})
        logger.remove()
        self._handler_ids.clear()

        if self.log_mode == "production":
            self._configure_production()
        else:
            self._configure_development()

    def _configure_development(self) -> None:
        """Colored console output."""
        self._handler_ids.append(
            logger.add(
                sys.stderr,
                format=CONSOLE_FORMAT,
                level=self.log_level,
                colorize=True,
                backtrace=True,
                diagnose=True,
            )
        )

    def _configure_production(self) -> None:
        """Rotated log files, with errors duplicated into their own file."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self._handler_ids.append(
            logger.add(
                self.log_dir / "agentcore_{time:YYYY-MM-DD}.log",
                format=FILE_FORMAT,
                level=self.log_level,
                rotation=self.log_rotation,
                retention=self.log_retention,
                compression=self.log_compression,
                encoding="utf-8",
                enqueue=True,
            )
        )
        self._handler_ids.append(
            logger.add(
                self.log_dir / "agentcore_error_{time:YYYY-MM-DD}.log",
                format=FILE_FORMAT,
                level="ERROR",
                rotation=self.log_rotation,
                retention=self.log_retention,
                compression=self.log_compression,
                encoding="utf-8",
                enqueue=True,
            )
        )

    def get_logger(self, name: Optional[str] = None):
        """
        Get a logger bound to a component name.

        Args:
            name: Usually ``__name__`` of the calling module. Defaults to "root".

        Returns:
            A loguru logger with ``extra["name"]`` bound.
        """
        return logger.bind(name=name or "root")

    def set_level(self, level: str) -> None:
        """Change the log level at runtime by rebuilding the sinks."""
        self.log_level = level.upper()
        self._configure()


def get_logger(name: Optional[str] = None):
    """
    Get a logger instance. This is the recommended way to log inside agentcore.

    Example:
        from agentcore.utils.logger import get_logger

        log = get_logger(__name__)
        log.info("Agent step finished")
    """
    return LoggerManager().get_logger(name)


def set_log_level(level: str) -> None:
    """Change log level at runtime (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""
    LoggerManager().set_level(level)


__all__ = ["LoggerManager", "get_logger", "set_log_level", "logger"]
