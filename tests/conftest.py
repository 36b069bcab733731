"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minirouter import Server, ServerConfig
from minirouter.http import HTTPRequest, HTTPResponse, Failure, Success, not_found


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with a query string."""
    return (
        b"GET /greet?name=john&verbose HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b'{"name": "John"}'
    return (
        b"POST /users HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        log_level="WARNING",
    )


def build_app(config: ServerConfig) -> Server:
    """Server with the routes the tests exercise."""
    server = Server(config)

    @server.get("/")
    def index(request: HTTPRequest) -> HTTPResponse:
        return HTTPResponse().set_html("<h1>Hi</h1>")

    @server.get("/greet/{name}")
    def greet(request: HTTPRequest) -> str:
        return f"Hello {request.get_param('name')}, nice to meet you!"

    @server.get("/users/{name}")
    def user(request: HTTPRequest):
        name = request.get_param("name")
        if name == "ghost":
            return Failure(not_found(f"no user {name}"))
        return Success(f"<p>{name}</p>")

    @server.post("/echo")
    def echo(request: HTTPRequest) -> HTTPResponse:
        return HTTPResponse().set_body(request.raw_content)

    @server.get("/boom")
    def boom(request: HTTPRequest):
        raise RuntimeError("handler exploded")

    return server


@pytest.fixture
def app(config: ServerConfig) -> Server:
    """Server with test routes, not listening."""
    return build_app(config)


class TestServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: Server):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def send(self, data: bytes) -> bytes:
        """Send raw bytes, return everything the server writes back."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(data)
            s.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Create and start a test server."""
    test_srv = TestServer(build_app(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
