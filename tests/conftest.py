import logging

import pytest


@pytest.fixture
def reset_logger():
    """Take urlgen's handlers off the root logger after the test."""
    logger = logging.getLogger()
    level = logger.level
    yield
    for handler in getattr(logger, 'urlgen_handlers', []):
        logger.removeHandler(handler)
        handler.close()
    if hasattr(logger, 'urlgen_handlers'):
        del logger.urlgen_handlers
    logger.setLevel(level)
