"""Shared pytest fixtures for prometheus-push tests.

Fixture Organization:
    - Transport fixtures: recording stubs that capture pushes without network
    - Sample data fixtures: prometheus_client registries with known metrics
    - Integration fixtures: live Pushgateway checks

References:
    - pytest fixtures docs: https://docs.pytest.org/en/stable/how-to/fixtures.html
"""

import logging
import socket
from dataclasses import dataclass

import httpx
import pytest
from prometheus_client import CollectorRegistry, Counter

from prometheus_push.transports import AsyncTransport, Transport

PUSHGATEWAY_PORT = 9091
BASE_URL = "http://pushgateway.test:9091"


# =============================================================================
# Pytest CLI Options
# =============================================================================


def pytest_addoption(parser):
    """Add custom command line options for test selection."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests requiring a live Pushgateway",
    )


def pytest_collection_modifyitems(session, config, items):
    """Skip integration tests unless --run-integration is provided."""
    if config.getoption("--run-integration", default=False):
        return

    skip_integration = pytest.mark.skip(
        reason="Need --run-integration option to run integration tests"
    )
    for item in items:
        if "integration" in item.keywords or "/integration/" in str(item.fspath):
            item.add_marker(skip_integration)


# =============================================================================
# Service Availability Check
# =============================================================================


def _is_port_open(port: int, host: str = "localhost") -> bool:
    """Check if a port is accepting connections."""
    try:
        with socket.create_connection((host, port), timeout=1):
            return True
    except (TimeoutError, ConnectionRefusedError, OSError):
        return False


@pytest.fixture(autouse=True)
def skip_without_services(request):
    """Auto-skip tests marked requires_pushgateway when port 9091 is closed."""
    if request.node.get_closest_marker("requires_pushgateway") and not _is_port_open(
        PUSHGATEWAY_PORT
    ):
        pytest.skip(f"Pushgateway not available on port {PUSHGATEWAY_PORT}")


@pytest.fixture(autouse=True)
def propagate_package_logs(monkeypatch, caplog):
    """Let caplog see prometheus_push records at INFO.

    configure_logging() disables propagation on import.
    """
    monkeypatch.setattr(logging.getLogger("prometheus_push"), "propagate", True)
    caplog.set_level(logging.INFO, logger="prometheus_push")


# =============================================================================
# Transport Fixtures
# =============================================================================


@dataclass
class PushCall:
    """One recorded transport call."""

    method: str
    url: httpx.URL
    body: bytes
    content_type: str


class RecordingTransport(Transport):
    """Blocking transport stub that records every push."""

    def __init__(self):
        self.calls: list[PushCall] = []
        self.closed = False

    def push_all(self, url, body, content_type):
        self.calls.append(PushCall("PUT", url, body, content_type))

    def push_add(self, url, body, content_type):
        self.calls.append(PushCall("POST", url, body, content_type))

    def close(self):
        self.closed = True


class AsyncRecordingTransport(AsyncTransport):
    """Asyncio transport stub that records every push."""

    def __init__(self):
        self.calls: list[PushCall] = []
        self.closed = False

    async def push_all(self, url, body, content_type):
        self.calls.append(PushCall("PUT", url, body, content_type))

    async def push_add(self, url, body, content_type):
        self.calls.append(PushCall("POST", url, body, content_type))

    async def aclose(self):
        self.closed = True


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def async_recording_transport() -> AsyncRecordingTransport:
    return AsyncRecordingTransport()


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def counter_registry() -> CollectorRegistry:
    """Registry holding one counter requests_total == 1."""
    registry = CollectorRegistry()
    Counter("requests_total", "Requests served", registry=registry).inc()
    return registry


@pytest.fixture
def job_labelled_registry() -> CollectorRegistry:
    """Registry holding a metric that carries a 'job' label."""
    registry = CollectorRegistry()
    Counter(
        "jobs_run_total", "Jobs run", ["job"], registry=registry
    ).labels(job="nightly").inc()
    return registry


@pytest.fixture
def instance_labelled_registry() -> CollectorRegistry:
    """Registry holding a metric that carries an 'instance' label."""
    registry = CollectorRegistry()
    Counter(
        "rows_processed_total", "Rows processed", ["instance"], registry=registry
    ).labels(instance="host1").inc(42)
    return registry
