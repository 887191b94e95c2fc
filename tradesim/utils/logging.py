"""Logging helper functions."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False, fmt: str = LOG_FORMAT) -> logging.Logger:
    """Route simulator log records to stderr.

    Existing root handlers are replaced so repeated calls do not duplicate
    output. Order placement, fills, expirations and rejections log at INFO;
    trailing-stop moves and worker lifecycle only show with ``verbose``.

    Args:
        verbose: Whether to enable debug logging
        fmt: Record format passed to the stream handler

    Returns:
        The ``tradesim`` package logger.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=log_level, format=fmt, handlers=[logging.StreamHandler()])
    package_logger = logging.getLogger("tradesim")
    package_logger.setLevel(log_level)
    return package_logger
