# Make `import core.*`, `import services.*` and `import app` resolve to this
# checkout when pytest is started from any directory.
import os
import sys

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = os.path.dirname(__file__)
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app import create_app  # noqa: E402
from core.config import Config, ProxySettings  # noqa: E402


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.proxied = []
        self.preflights = []
        self.debug = []
        self.errors = []

    def log_proxy(self, method, url, status, client_ip, headers=None):
        self.proxied.append((method, url, status, client_ip))

    def log_preflight(self, path, origin):
        self.preflights.append((path, origin))

    def log_debug(self, message):
        self.debug.append(message)

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


class Upstream:
    """Fake upstream server recording the requests it receives."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.headers: list[tuple[str, str]] = [("Content-Type", "application/json")]
        self.content = b'{"ok": true}'
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        # A real stream, so the relay can read it with aiter_raw
        return httpx.Response(self.status_code, headers=self.headers, stream=httpx.ByteStream(self.content))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_config(**proxy) -> Config:
    return Config(proxy=ProxySettings(**proxy))


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def make_client(recording_logger, upstream):
    """Factory for a TestClient wired to the fake upstream."""
    clients = []

    def _make(**proxy) -> TestClient:
        app = create_app(make_config(**proxy), recording_logger, transport=httpx.MockTransport(upstream))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
