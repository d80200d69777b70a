"""
Logging configuration for lsext
Console logging goes to stderr so stdout only carries the report
"""

import logging
import sys
from pathlib import Path
from typing import Union

LOGGER_NAME = "lsext"
DEFAULT_LEVEL = "WARNING"


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def __init__(self, fmt: str = None, datefmt: str = None, use_color: bool = True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record):
        message = super().format(record)
        if self.use_color and record.levelname in self.COLORS:
            colored = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"
            message = message.replace(record.levelname, colored, 1)
        return message


class StderrHandler(logging.StreamHandler):
    """Stream handler that writes to whatever sys.stderr is at emit time"""

    def __init__(self):
        super().__init__()

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass

    def format(self, record):
        if isinstance(self.formatter, ColoredFormatter):
            isatty = getattr(sys.stderr, "isatty", None)
            self.formatter.use_color = bool(isatty and isatty())
        return super().format(record)


def _level_number(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.WARNING)


def is_valid_level(level: str) -> bool:
    """Check that a name refers to a standard logging level"""
    return isinstance(getattr(logging, str(level).upper(), None), int)


def setup_logger(level: Union[str, int] = DEFAULT_LEVEL) -> logging.Logger:
    """Setup the lsext logger with a stderr console handler"""
    logger = logging.getLogger(LOGGER_NAME)
    numeric_level = _level_number(level)
    logger.setLevel(numeric_level)

    # Avoid duplicate console handlers across repeated runs in one process
    console_handler = next((h for h in logger.handlers if isinstance(h, StderrHandler)), None)
    if console_handler is None:
        console_handler = StderrHandler()
        console_handler.setFormatter(ColoredFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        ))
        logger.addHandler(console_handler)
    console_handler.setLevel(numeric_level)

    return logger


def add_file_handler(logger: logging.Logger, log_file: str) -> None:
    """Attach a DEBUG file handler, unless one already writes to this file"""
    log_path = Path(log_file).expanduser().resolve()
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_path:
            return

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
    except OSError as e:
        logger.warning(f"Could not setup file logging: {e}")
        return

    file_handler.setLevel(logging.DEBUG)  # Always DEBUG for file
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(funcName)s() - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(file_handler)
    # The logger level gates the file handler too
    logger.setLevel(logging.DEBUG)
    logger.debug(f"Logging to file: {log_path}")


def set_level(level: Union[str, int]) -> None:
    """Change the console log level"""
    logger = logging.getLogger(LOGGER_NAME)
    numeric_level = _level_number(level)
    for handler in logger.handlers:
        if isinstance(handler, StderrHandler):
            handler.setLevel(numeric_level)
    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        logger.setLevel(numeric_level)


def set_debug_mode():
    """Enable debug mode for all lsext loggers"""
    set_level(logging.DEBUG)
