from __future__ import annotations

import logging
import sys

LOGGER_NAME = "task_api"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# PUBLIC_INTERFACE
def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure the package logger with a single stderr handler.

    Safe to call more than once (e.g. one app per test): the handler is
    installed only once and later calls just adjust the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not any(h.get_name() == LOGGER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler.set_name(LOGGER_NAME)
        logger.addHandler(handler)

    return logger
