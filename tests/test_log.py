import logging

from rich.logging import RichHandler

from page_factory.core.log import PACKAGE_LOGGER, setup_logging


def test_setup_logging_is_idempotent() -> None:
    logger = logging.getLogger(PACKAGE_LOGGER)
    before = list(logger.handlers)
    propagate = logger.propagate
    try:
        setup_logging("DEBUG")
        setup_logging("INFO")
        rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert logger.level == logging.INFO
        assert logger.propagate is False
    finally:
        logger.handlers[:] = before
        logger.propagate = propagate
        logger.setLevel(logging.NOTSET)
