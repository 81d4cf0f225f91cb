"""Pytest configuration and shared fixtures for logsift tests.

This module provides auto-use fixtures that ensure test isolation,
particularly for cache directories and LOGSIFT_* settings.
"""

import os
import shutil
import tempfile

import httpx
import pytest

from logsift import readers


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Auto-use fixture that isolates cache directory and settings for each test.

    This fixture:
    1. Creates a temporary directory for the test's cache
    2. Sets LOGSIFT_CACHE_DIR environment variable to point to it
    3. Removes any LOGSIFT_* setting inherited from the user's environment
    4. Cleans up the directory after the test completes
    """
    for key in list(os.environ):
        if key.startswith('LOGSIFT_'):
            monkeypatch.delenv(key)

    temp_cache_dir = tempfile.mkdtemp(prefix='logsift_test_cache_')
    monkeypatch.setenv('LOGSIFT_CACHE_DIR', temp_cache_dir)

    yield temp_cache_dir

    shutil.rmtree(temp_cache_dir, ignore_errors=True)


@pytest.fixture
def temp_cache_dir(isolate_environment):
    """Fixture that provides access to the isolated cache directory path."""
    return isolate_environment


@pytest.fixture
def log_dir():
    """A temporary directory to write log files into."""
    path = tempfile.mkdtemp(prefix='logsift_test_logs_')
    yield path
    shutil.rmtree(path, ignore_errors=True)


def write_lines(path: str, lines: list[str]) -> str:
    """Write lines to path (creating parent directories) and return the path."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w') as f:
        f.write(''.join(f'{line}\n' for line in lines))
    return path


@pytest.fixture
def mock_http(monkeypatch):
    """Route every http request to a dict of url -> response.

    Values are either a string (html or text body, status 200), bytes, an
    int (status code with empty body), a list or dict (json body), an
    httpx.Response or an httpx.TransportError subclass to raise.

    Returns:
        The dict of routes, and the list of requested urls in the
        'requests' attribute of the fixture value.
    """

    class Routes(dict):
        def __init__(self):
            super().__init__()
            self.requests: list[str] = []

    routes = Routes()

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url).split('?')[0]
        routes.requests.append(str(request.url))
        value = routes.get(url)
        if value is None:
            return httpx.Response(404)
        if isinstance(value, type) and issubclass(value, httpx.TransportError):
            raise value('mocked transport failure', request=request)
        if isinstance(value, httpx.Response):
            return value
        if isinstance(value, int):
            return httpx.Response(value)
        if isinstance(value, bytes):
            return httpx.Response(200, content=value)
        if isinstance(value, (list, dict)):
            return httpx.Response(200, json=value)
        return httpx.Response(200, text=value)

    monkeypatch.setattr(
        readers, 'make_http_client', lambda: httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
    )
    return routes
