import logging
import os
import sys
from typing import Optional, TextIO

from tqdm import tqdm

LOGGER_NAME = "locale_translator"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


class TqdmLoggingHandler(logging.Handler):
    """Console handler that prints above the file progress bar instead of through it."""

    def __init__(self, stream: Optional[TextIO] = None, level=logging.NOTSET):
        super().__init__(level)
        self.stream = stream

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=self.stream or sys.stderr)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


def _close_handlers(logger: logging.Logger) -> None:
    """Detach and close every handler so reconfiguring never leaks open log files."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _build_file_handler(log_file_path: str) -> logging.FileHandler:
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    return logging.FileHandler(log_file_path, encoding='utf-8')


def setup_logger(log_level_str: str, log_file_path: str, log_to_console: bool) -> logging.Logger:
    """
    Configure the ``locale_translator`` logger for a run.

    Every module logs through a child of this logger. Records go to
    ``log_file_path`` (skipped when empty) and, if ``log_to_console`` is set,
    to stderr through tqdm so they do not break the progress bar. Handlers
    from an earlier call are closed first.

    Args:
        log_level_str: Level name such as 'INFO' or 'debug'. Unknown names fall back to INFO.
        log_file_path: Log file path, or an empty string for no file logging.
        log_to_console: Whether to also log to the console.

    Returns:
        The configured logger instance.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level_str.upper(), logging.INFO))
    logger.propagate = False
    _close_handlers(logger)

    handlers = []
    if log_file_path:
        handlers.append(_build_file_handler(log_file_path))
    if log_to_console:
        handlers.append(TqdmLoggingHandler())

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
