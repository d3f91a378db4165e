"""
pytest configuration and fixtures.
"""

import io
import socket
import threading
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from basket import Router, ServerConfig
from basket.core.socket_server import create_listener


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /api/users?page=1&limit=10 HTTP/1.1\r\n"
        b"host: localhost\r\n"
        b"connection: close\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with JSON body."""
    body = b'{"name": "John", "age": 42}'
    return (
        b"POST /api/users HTTP/1.1\r\n"
        b"host: localhost\r\n"
        b"content-type: application/json\r\n"
        + f"content-length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def sample_response() -> bytes:
    """Sample HTTP response with a text body."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"content-length: 4\r\n"
        b"content-type: text/plain\r\n"
        b"\r\n"
        b"ping"
    )


class TrickleReader(io.RawIOBase):
    """Readable stream that hands out at most ``chunk`` bytes per read()."""

    def __init__(self, data: bytes, chunk: int = 1):
        self._data = io.BytesIO(data)
        self._chunk = chunk

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if size < 0 or size > self._chunk:
            size = self._chunk
        return self._data.read(size)


@pytest.fixture
def trickle():
    """Factory for streams that deliver data in small pieces."""
    return TrickleReader


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Runs Router.listen() in a background thread."""

    __test__ = False

    def __init__(self, router: Router):
        self.router = router
        self.listener = create_listener(ServerConfig(host="127.0.0.1", port=0))
        self.port = self.listener.getsockname()[1]
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    def _run(self):
        try:
            self.router.listen(self.listener)
        except Exception as e:
            # listen() only ever ends by raising; keep it for assertions
            self.error = e

    def start(self):
        """Start the accept loop. The listener is already bound."""
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self):
        """Stop the accept loop by shutting the listener down."""
        try:
            self.listener.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.listener.close()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def serve_router() -> Generator:
    """Start a TestServer for a router; stopped at teardown."""
    servers = []

    def start(router: Router) -> TestServer:
        server = TestServer(router)
        server.start()
        servers.append(server)
        return server

    yield start

    for server in servers:
        server.stop()
