"""Logging configuration helpers."""

import logging

PACKAGE_LOGGER = "pantry_keeper"
LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def parse_log_level(raw: str | None) -> int:
    """Map a level name to its number, falling back to INFO."""
    if not raw:
        return logging.INFO
    return logging.getLevelNamesMapping().get(raw.strip().upper(), logging.INFO)


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach one stream handler to the package logger.

    Repeated calls only adjust the level, so app factories can call this
    freely.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(parse_log_level(level))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
