from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Optional

LOG_DIR_ENV = "COURSEPRESS_LOG_DIR"


class LoggerConfig:
    """Configuration shared by every coursepress logger."""

    def __init__(
        self,
        log_dir: Optional[str] = None,
        log_file: str = "coursepress.log",
        console_level: int = logging.INFO,
        file_level: int = logging.DEBUG,
        fmt: str = "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt: str = "%Y-%m-%d %H:%M:%S",
    ) -> None:
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_file = self.log_dir / log_file if self.log_dir else None
        self.console_level = console_level
        self.file_level = file_level
        self.fmt = fmt
        self.datefmt = datefmt

    def ensure_log_dir(self) -> None:
        """Creates the log directory when file logging is enabled."""
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

    def get_formatter(self) -> logging.Formatter:
        """Returns a reusable logging formatter."""
        return logging.Formatter(self.fmt, datefmt=self.datefmt)


def _file_handler(config: LoggerConfig) -> logging.FileHandler:
    config.ensure_log_dir()
    handler = logging.FileHandler(config.log_file, encoding="utf-8")
    handler.setLevel(config.file_level)
    handler.setFormatter(config.get_formatter())
    return handler


def get_logger(name: str, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Factory function to create or retrieve a configured logger.

    File logging is off unless ``log_dir`` is given or the
    ``COURSEPRESS_LOG_DIR`` environment variable is set, so importing the
    structuring core never touches the filesystem.

    Args:
        name: Name of the logger (usually __name__ of the calling module).
        log_dir: Directory where log files should be stored.

    Returns:
        logging.Logger: Configured logger instance.
    """
    config = LoggerConfig(log_dir=log_dir or os.environ.get(LOG_DIR_ENV))

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(config.console_level)
        console_handler.setFormatter(config.get_formatter())
        logger.addHandler(console_handler)

        if config.log_file is not None:
            logger.addHandler(_file_handler(config))

    return logger


def configure_file_logging(log_dir: str, *names: str) -> None:
    """Attach a file handler to already-created loggers (used by the CLI)."""
    config = LoggerConfig(log_dir=log_dir)
    for name in names:
        logger = logging.getLogger(name)
        if any(isinstance(h, logging.FileHandler) for h in logger.handlers):
            continue
        logger.addHandler(_file_handler(config))
