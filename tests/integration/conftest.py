"""Integration test fixtures for prometheus-push.

Integration tests talk to a real Pushgateway, by default on localhost:9091
(``docker run -p 9091:9091 prom/pushgateway``).
"""

import os

import httpx
import pytest

from prometheus_push.config import PushConfig


def pytest_collection_modifyitems(items):
    """Auto-apply @pytest.mark.integration to all tests in this directory.

    Ensures `pytest -m 'not integration'` excludes ALL integration tests.
    """
    for item in items:
        if "/tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def pushgateway_url() -> str:
    return os.environ.get("PUSHGATEWAY_URL", "http://localhost:9091")


@pytest.fixture
def push_config(pushgateway_url) -> PushConfig:
    return PushConfig(_env_file=None, pushgateway_url=pushgateway_url)


@pytest.fixture
def scrape(pushgateway_url):
    """Return the gateway's own /metrics exposition as text."""

    def _scrape() -> str:
        response = httpx.get(f"{pushgateway_url}/metrics", timeout=5.0)
        response.raise_for_status()
        return response.text

    return _scrape
