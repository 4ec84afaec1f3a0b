"""Logging configuration for the recorder daemon."""

import logging


def configure_logging(quiet: bool = False, debug: bool = False) -> logging.Logger:
    """Configure root logging once at startup.

    Args:
        quiet: Only show warnings and errors.
        debug: Show debug output (ignored when quiet is set).

    Returns:
        The package logger.
    """
    if quiet:
        log_level = logging.WARNING
    elif debug:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # requests logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger("yt_live_recorder")
