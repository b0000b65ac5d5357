"""Pytest fixtures for epubsaver tests.

Nothing here touches the network: tests that fetch mock httpx with respx.
"""

import logging

import pytest
import pytest_asyncio
import structlog

from book import EpubBook
from tests.helpers import FIXED_NOW


@pytest_asyncio.fixture
async def book():
    """A fresh book with a fixed clock; its HTTP client is closed afterwards."""
    async with EpubBook(clock=lambda: FIXED_NOW) as b:
        yield b


@pytest.fixture
def advisories():
    """Collects advisories delivered through on_advisory."""
    return []


@pytest_asyncio.fixture
async def watched_book(advisories):
    async with EpubBook(clock=lambda: FIXED_NOW, on_advisory=advisories.append) as b:
        yield b


@pytest.fixture
def restore_logging():
    """configure_logging() replaces the root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
