"""Root pytest configuration for kloset-http tests."""
import pytest

from kloset_http.settings import Settings
from kloset_http.storage.http_store import HTTPStore

from .helpers.locations import LOCATION
from .storage.fakes.fake_kloset_server import FakeKlosetServer


# Keep host environment out of settings loading
@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Clear adapter environment variables for every test."""
    for key in (
        "KLOSET_HTTP_LOCATION",
        "KLOSET_HTTP_TOKEN",
        "KLOSET_HTTP_PROTOCOL",
        "KLOSET_HTTP_TIMEOUT",
        "KLOSET_HTTP_MAC_ENCODING",
        "KLOSET_HTTP_INSECURE",
    ):
        monkeypatch.delenv(key, raising=False)


# Standardized test fixtures
@pytest.fixture
def server():
    """Fake Kloset server serving the /repo prefix."""
    return FakeKlosetServer()


@pytest.fixture
def settings():
    """Standard RPC-protocol test settings."""
    return Settings(location=LOCATION)


@pytest.fixture
def store(settings, server):
    """HTTP store wired to the fake server over the RPC protocol."""
    with server.client("rpc") as client:
        yield HTTPStore(settings, client=client)


@pytest.fixture
def resource_store(server):
    """HTTP store wired to the fake server over the resource-path protocol."""
    settings = Settings(location=LOCATION, protocol="resource")
    with server.client("resource") as client:
        yield HTTPStore(settings, client=client)
