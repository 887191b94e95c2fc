import logging

from tradesim.utils import configure_logging


def test_configure_logging_replaces_root_handlers():
    saved_handlers = logging.root.handlers[:]
    saved_level = logging.root.level
    package_logger = logging.getLogger("tradesim")
    saved_package_level = package_logger.level
    try:
        logger = configure_logging(verbose=True)
        assert logger is package_logger
        assert logger.isEnabledFor(logging.DEBUG)
        assert len(logging.root.handlers) == 1

        configure_logging()
        assert not logger.isEnabledFor(logging.DEBUG)
        assert logger.isEnabledFor(logging.INFO)
        assert len(logging.root.handlers) == 1
    finally:
        logging.root.handlers[:] = saved_handlers
        logging.root.setLevel(saved_level)
        package_logger.setLevel(saved_package_level)
