"""
=============================================================================
MINIROUTER - A Minimal HTTP/1.1 Request Router on Raw Sockets
=============================================================================

Register handlers against (method, path template) pairs, then serve them
from a single-threaded, blocking TCP accept loop.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minirouter/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minirouter)
    ├── server.py            # Server: registration + request pipeline
    ├── config.py            # ServerConfig dataclass
    ├── core/                # Socket-level components
    │   ├── socket_server.py # Blocking accept loop, signals
    │   └── connection.py    # One-shot client connection
    └── http/                # Protocol components
        ├── request.py       # Request line + query parsing
        ├── response.py      # Response model, serializer, conversions
        ├── router.py        # Templates, matching, dispatch
        └── status_codes.py  # Status codes and wire names

=============================================================================
QUICK START
=============================================================================

    from minirouter import Server, ServerConfig, HTTPResponse

    server = Server(ServerConfig(port=8080))

    @server.get("/")
    def index(request):
        return HTTPResponse().set_json('{"msg":"hello world"}')

    @server.get("/greet/{name}")
    def greet(request):
        return f"Hello {request.get_param('name')}, nice to meet you!"

    server.run()

=============================================================================
"""

__version__ = "0.1.0"

from .config import ServerConfig
from .http import (
    HTTPRequest,
    HTTPResponse,
    HTTPStatus,
    HttpMethod,
    RequestParseError,
    RouteDefinitionError,
    Failure,
    Success,
)
from .server import Server, create_app

__all__ = [
    "Server",
    "ServerConfig",
    "create_app",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPStatus",
    "HttpMethod",
    "RequestParseError",
    "RouteDefinitionError",
    "Success",
    "Failure",
    "__version__",
]
