"""Tests for the loguru sink setup and stdlib forwarding."""

import logging

import pytest
from loguru import logger

from rentgeo.core.config import Settings
from rentgeo.core.logging import setup_logging


@pytest.fixture
def captured():
    messages = []
    setup_logging(Settings(LOG_LEVEL="warning", LOG_JSON=True))
    sink_id = logger.add(messages.append, format="{level}:{message}", level="DEBUG")
    yield messages
    logger.remove(sink_id)
    setup_logging()


def test_stdlib_records_are_forwarded(captured):
    logging.getLogger("httpx").warning("upstream slow")
    assert any(m.strip() == "WARNING:upstream slow" for m in captured)


def test_library_loggers_do_not_propagate(captured):
    assert logging.getLogger("sqlalchemy.engine").propagate is False
