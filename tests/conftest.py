"""Shared pytest fixtures."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest

from cardwire.const import CARDWIRE_LOG_NAME


@pytest.fixture(autouse=True)
def restore_package_logger() -> Generator[None]:
    """Undo configure_logging() calls so handlers never outlive a test's captured streams."""
    package_logger = logging.getLogger(CARDWIRE_LOG_NAME)
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in list(package_logger.handlers):
        if handler not in handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)
