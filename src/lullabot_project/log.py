"""Logging setup for the CLI."""

import logging

from rich.logging import RichHandler

PACKAGE_LOGGER = "lullabot_project"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a RichHandler to the package logger.

    Verbose runs narrate at DEBUG; otherwise only warnings surface.
    Calling this more than once replaces the previous handler.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(show_time=False, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger
