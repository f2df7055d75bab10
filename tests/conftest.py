"""
Shared pytest fixtures for drivethru tests.
"""

import logging
import random

import pytest

from drivethru.config import DEFAULT_CONFIG, apply_overrides


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def empty_queues() -> dict:
    """Queue view with every stage empty, keyed like SimContext.queue_view()."""
    return {"order_a": [], "order_b": [], "pay": [], "pickup": [], "curbside": []}


@pytest.fixture
def make_cfg():
    """Build a full config from DEFAULT_CONFIG plus overrides."""

    def _make(**sections):
        return apply_overrides(DEFAULT_CONFIG, sections)

    return _make


@pytest.fixture(autouse=True)
def reset_drivethru_logging():
    """Reset the drivethru logger before and after each test.

    Removes all handlers except NullHandler and resets the level so logging
    configuration from one test cannot leak into another.
    """
    logger = logging.getLogger("drivethru")

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        if not isinstance(handler, logging.NullHandler):
            handler.close()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)

    yield

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        if not isinstance(handler, logging.NullHandler):
            handler.close()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)
