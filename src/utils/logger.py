"""
Logging Setup

Console (and optional file) logging for the renewal tool.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class ColoredFormatter(logging.Formatter):
    """Adds ANSI colors to the level name when writing to a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str = None, use_colors: bool = True, stream=None):
        super().__init__(fmt or LOG_FORMAT)
        stream = stream or sys.stdout
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        original_levelname = record.levelname
        color = self.COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def setup_logging(verbose: bool = False, log_file: Optional[str] = None,
                  use_colors: bool = True) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        verbose: Enable debug-level logging
        log_file: Optional file path that also receives the log output
        use_colors: Color the level names on a terminal

    Returns:
        The configured root logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter(use_colors=use_colors, stream=sys.stdout))
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    # The kubernetes client logs every request at debug level
    logging.getLogger('kubernetes').setLevel(logging.INFO if verbose else logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    return root

