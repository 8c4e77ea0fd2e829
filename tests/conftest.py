"""
Test configuration and fixtures for the ImageScout API.

Browser and network access are never used in tests: Selenium drivers and
elements are MagicMocks and outbound HTTP goes through httpx.MockTransport.
"""

import os
from contextlib import contextmanager
from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("ENVIRONMENT", "local")
os.environ.setdefault("LOG_LEVEL", "DEBUG")


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from imagescout.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    with TestClient(test_app) as test_client:
        yield test_client


class FakePageLoader:
    """Stands in for PageLoaderService and records session usage."""

    def __init__(self, driver=None, error=None):
        self.driver = driver if driver is not None else MagicMock()
        self.error = error
        self.sessions = []
        self.released = 0

    @contextmanager
    def browser_session(self, url, timeout=None, scroll=False):
        self.sessions.append({"url": url, "scroll": scroll})
        try:
            if self.error:
                raise self.error
            yield self.driver
        finally:
            self.released += 1


@pytest.fixture
def make_page_loader():
    """Factory for FakePageLoader: make_page_loader(driver=..., error=...)."""
    return FakePageLoader
