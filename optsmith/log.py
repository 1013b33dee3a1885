"""
Optsmith logging setup.

The library modules only create loggers (logging.getLogger(__name__)); handlers are
installed by applications. setup_logging() is what the documentation tool uses: a
rich handler on stderr, with the level taken from the argument, else from the
OPTSMITH_LOG_LEVEL environment variable, else WARNING.
"""
import logging
import os

from rich.console import Console
from rich.logging import RichHandler

ENVIRONMENT_VARIABLE = "OPTSMITH_LOG_LEVEL"

console_stderr = Console(stderr=True)


def resolve_level(level=None, /):
    """
    numeric logging level from an int, a level name, or the environment.
    """
    if level is None:
        level = os.environ.get(ENVIRONMENT_VARIABLE, "WARNING")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError("unknown logging level %r" % (level,))
    return resolved


def setup_logging(level=None, /):
    """
    Route the "optsmith" loggers to a RichHandler on stderr; returns the package logger.

    Calling it again replaces the handler instead of stacking a second one.
    """
    logger = logging.getLogger("optsmith")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=console_stderr, show_path=False, show_time=False, markup=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(resolve_level(level))
    logger.propagate = False
    return logger


__all__ = (
    "ENVIRONMENT_VARIABLE",
    "resolve_level",
    "setup_logging",
)
