"""Helpers for setting up colorful logging of the compression routines."""

import logging

import colorlog

DEBUG = logging.DEBUG
INFO = logging.INFO
WARNING = logging.WARNING
ERROR = logging.ERROR
CRITICAL = logging.CRITICAL

_fmt = "%(log_color)s%(name)s [%(levelname)s] %(message)s"
_fmt_time = "%(log_color)s%(asctime)s %(name)s [%(levelname)s] %(message)s"


def setup(
    level: int = logging.INFO, logger: logging.Logger = None, timestamps: bool = False
) -> logging.Logger:
    """Setup a colorful logging output.

    If `logger` is None, sets up only the ``pyrawcomp`` logger. Calling this
    function more than once replaces the handler previously installed by it
    instead of stacking a new one.

    Parameters
    ----------
    level
        logging level (see :mod:`logging` module).
    logger
        if not `None`, setup this logger.
    timestamps
        prefix each record with its creation time.

    Returns
    -------
    logger
        the configured logger.

    Examples
    --------
    >>> from pyrawcomp import logging
    >>> logging.setup(level=logging.DEBUG)
    """
    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(_fmt_time if timestamps else _fmt))
    handler.set_name("pyrawcomp")

    if logger is None:
        logger = colorlog.getLogger("pyrawcomp")

    for h in list(logger.handlers):
        if h.get_name() == "pyrawcomp":
            logger.removeHandler(h)

    logger.setLevel(level)
    logger.addHandler(handler)

    return logger
