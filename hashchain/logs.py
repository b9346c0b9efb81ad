"""
Logging helpers for hashchain.

Library modules only get loggers; handlers are attached by the
application (see setup_logging, used by the demo driver).
"""

import logging

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'
ROOT_LOGGER = 'hashchain'

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


def get_logger(name=None):
    """Return a logger for a hashchain module."""
    return logging.getLogger(name)


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Attach one stream handler with the standard format to the package logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    return logger
