"""
Userbase library containing logging helper functionality

All loggers of this project live below the ``userbase_core`` logger.
"""

import logging
from typing import Optional


PROJECT_LOGGER_NAME = "userbase_core"


def get_project_logger(component: Optional[str] = None) -> logging.Logger:
    """
    Return the project logger or the child logger of the given component
    """

    if not component:
        return logging.getLogger(PROJECT_LOGGER_NAME)
    return logging.getLogger(PROJECT_LOGGER_NAME).getChild(component)


def enforce_logger(logger: Optional[logging.Logger] = None, component: Optional[str] = None) -> logging.Logger:
    """
    Enforce availability of a working logger

    Without an explicit logger, the project logger of the given
    component is used, so the messages end up in the configured handlers.
    """

    if logger is not None and isinstance(logger, logging.Logger):
        return logger
    elif logger is not None:
        raise TypeError(f"Expected 'logging.Logger', got {type(logger)}")
    log = get_project_logger(component)
    log.debug("No logger specified for function call; using the project logger.")
    return log


class NoDebugFilter(logging.Filter):
    """
    Logging filter that filters out any DEBUG message for the specified logger or handler
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if super().filter(record):
            return record.levelno > logging.DEBUG
        return True
