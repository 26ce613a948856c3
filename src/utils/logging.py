"""Logging helper shared by the lane classification and render packages.

Every module obtains its logger through :func:`get_logger` so that log
lines carry the same format whether they come from the classifier, the
map builder or the CLI pipeline.  The helper only attaches a handler
once per logger name.
"""

import logging
from typing import Optional

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Return a configured logger with the package-wide format.

    Parameters
    ----------
    name : str
        Logger name, normally the calling module's ``__name__``.
    level : int, optional
        Level to set on a freshly configured logger.  Defaults to INFO.
        An already configured logger keeps its level unless one is given.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO if level is None else level)
    elif level is not None:
        logger.setLevel(level)
    return logger
