import logging

import pytest
import structlog

from inccov.log import configure_logging


@pytest.fixture(autouse=True)
def _quiet_logging():
    """Route structlog through a WARNING-level stderr handler for each test."""
    configure_logging(level="WARNING")
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()
