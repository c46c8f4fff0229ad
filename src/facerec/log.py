"""Logging setup for programs embedding the library.

Library modules only create loggers; the host program calls
``configure_logging`` once to decide where diagnostics go.
"""

import logging
from typing import Union

PACKAGE_LOGGER = "facerec"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Calling it again only changes the level; no second handler is added.

    Args:
        level: Logging level name or number
        fmt: Format string for the handler

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    if not any(getattr(h, "_facerec", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        handler._facerec = True
        logger.addHandler(handler)

    return logger
