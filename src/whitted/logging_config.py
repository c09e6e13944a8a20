"""Logging configuration for the ray tracer scripts."""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", name: str = "src.whitted") -> logging.Logger:
    """Attach a console handler to the package logger.

    Calling this more than once does not add duplicate handlers.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        name: Logger name to configure. Defaults to the package root logger.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_whitted_console", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._whitted_console = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
