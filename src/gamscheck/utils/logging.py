"""
Logging setup using loguru.
"""
import sys

from loguru import logger

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
CONSOLE_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"


def setup_logging(log_level: str = "INFO", log_file: str | None = None, console: bool = True) -> None:
    """
    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_file:  persistent log path, or None for no file sink
        console:   also log to stderr (off while the TUI owns the terminal)
    """
    logger.remove()

    if console:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level, colorize=True)

    if log_file:
        logger.add(log_file, format=FILE_FORMAT, level=log_level, rotation="10 MB", retention="1 week")
