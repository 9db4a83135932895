"""
Logging Configuration
Attaches handlers to the 'reorder_kernel' package logger. Library modules
only call `logging.getLogger(__name__)`; applications opt in here.
"""
import logging
import sys
from typing import List, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Route reorder kernel logs to stdout and, optionally, a file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to append logs to.
    """
    logger = logging.getLogger("reorder_kernel")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("reorder_kernel logging configured at %s", logging.getLevelName(level))
    return logger
