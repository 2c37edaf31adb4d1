"""
Logging for body-timeline
Console logging plus the per-run entry error log
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "bodytimeline"


class TimelineFormatter(logging.Formatter):
    """Custom formatter with color support for console"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_color: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_color = use_color

    def format(self, record):
        if self.use_color and sys.stderr.isatty():
            levelname = record.levelname
            if levelname in self.COLORS:
                record.levelname = (
                    f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
                )
        return super().format(record)


def setup_logging(
    level: str = "WARNING",
    log_to_console: bool = True,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Setup logging

    The console handler writes to stderr because stdout carries the
    timeline output of the ``process`` command.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_console: Enable console logging
        log_file: Optional file receiving DEBUG output

    Returns:
        Logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(TimelineFormatter(use_color=True))
        logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)  # Always DEBUG for file
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

        logger.info(f"Logging to file: {log_file}")

    return logger


class EntryErrorLog:
    """
    Append-only side log of entries skipped during collection

    One line per skipped entry: ``[timestamp] path: error``. The file is
    created on the first error only and the handler is released when the
    context exits. Every instance owns its own logger so two runs never
    share a handle.
    """

    def __init__(self, log_path: Path):
        """
        Initialize entry error log

        Args:
            log_path: Path to the side log file
        """
        self.log_path = Path(log_path)
        self.count = 0
        self._handler: Optional[logging.FileHandler] = None

        self.logger = logging.Logger(f"{LOGGER_NAME}.entries", logging.INFO)
        self.logger.propagate = False

    def __enter__(self) -> "EntryErrorLog":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._handler is not None:
            return
        # delay=True: no file unless something is written
        handler = logging.FileHandler(self.log_path, mode="a", delay=True)
        handler.setFormatter(
            logging.Formatter(fmt="[%(asctime)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
        self.logger.addHandler(handler)
        self._handler = handler

    def close(self) -> None:
        if self._handler is None:
            return
        self.logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None

    def log(self, path: str, error: object) -> None:
        """Record that ``path`` was skipped because of ``error``"""
        self.count += 1
        self.logger.info("%s: %s", path, error)
        get_module_logger("collector").debug("Skipped %s: %s", path, error)


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get logger for a specific module

    Args:
        module_name: Module name

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{LOGGER_NAME}.{module_name}")
