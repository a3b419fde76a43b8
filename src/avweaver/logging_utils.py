"""Logging setup for the weaver command line.

Modules only create loggers with ``logging.getLogger(__name__)``. The one
handler is installed by ``main()`` on the ``avweaver`` package logger, so
importing avweaver as a library leaves the root logger alone.
"""

import logging
import os

PACKAGE_LOGGER = "avweaver"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_handler = None


def _level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    level = logging.getLevelName((os.getenv("LOG_LEVEL") or "WARNING").upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr handler to the package logger and set its level.

    The level is DEBUG with ``verbose``, else ``LOG_LEVEL`` from the
    environment, else WARNING. Calling again replaces the handler, so
    repeated ``main()`` calls write to the current stderr.
    """
    global _handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(_level(verbose))
    return logger
