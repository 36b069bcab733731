"""
=============================================================================
SERVER
=============================================================================

Ties the pieces together:

    raw bytes ──► RequestParser ──► Router ──► handler ──► HTTPResponse
                        │              │                        │
                  parse error      no match                to_bytes()
                        ▼              ▼                        ▼
                   400 BadRequest  404 NotFound             wire bytes

``Server.handle()`` is the whole request pipeline as a pure bytes → bytes
function; ``Server.run()`` feeds it from the socket server, one connection
at a time.

=============================================================================
ERROR RECOVERY
=============================================================================

    RequestParseError   → 400 BadRequest naming the error (never re-raised)
    no matching route   → 404 NotFound
    handler raises      → 500 InternalServerError, traceback logged

Nothing a client sends can take the serving loop down.

=============================================================================
"""

import logging
from typing import Optional, Tuple, Union

from .config import ServerConfig
from .core import Connection, SocketServer
from .http import (
    HTTPRequest,
    HttpMethod,
    HTTPResponse,
    RequestParser,
    RequestParseError,
    Route,
    Router,
    internal_error,
    to_response,
)
from .http.router import Handler, TemplateLike


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("minirouter.access")


class Server:
    """
    Single-threaded HTTP/1.1 router server.

    =========================================================================
    USAGE
    =========================================================================

        server = Server(ServerConfig(port=8080))

        @server.get("/")
        def index(request):
            return HTTPResponse().set_json('{"msg":"hello world"}')

        @server.get("/greet/{name}")
        def greet(request):
            return f"Hello {request.get_param('name')}, nice to meet you!"

        server.run()

    Routes must all be registered before run(): the route table is frozen
    when serving starts.
    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used if omitted.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._parser = RequestParser()
        self._router = Router()
        self._socket_server = SocketServer(self.config)

    @property
    def router(self) -> Router:
        """The underlying route table."""
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port) once running; configured address before."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def register(
        self,
        method: Union[HttpMethod, str],
        path: TemplateLike,
        handler: Handler,
    ) -> Route:
        """
        Register a handler for a method and route template.

        Order matters: when several routes match a request, the one
        registered first wins.
        """
        return self._router.add_route(method, path, handler)

    def add_route(self, method: Union[HttpMethod, str], path: TemplateLike, handler: Handler) -> "Server":
        """Chaining form of register()."""
        self.register(method, path, handler)
        return self

    def route(self, path: str, method: Union[HttpMethod, str] = HttpMethod.GET):
        """Decorator registering a route for any supported method."""
        return self._router.route(path, method)

    def get(self, path: str):
        """Register a GET route."""
        return self._router.get(path)

    def post(self, path: str):
        """Register a POST route."""
        return self._router.post(path)

    def put(self, path: str):
        """Register a PUT route."""
        return self._router.put(path)

    def patch(self, path: str):
        """Register a PATCH route."""
        return self._router.patch(path)

    def delete(self, path: str):
        """Register a DELETE route."""
        return self._router.delete(path)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle(self, raw: bytes) -> bytes:
        """
        Run one request through the full pipeline.

        =====================================================================
        PIPELINE
        =====================================================================

            1. Parse           → 400 on RequestParseError, no route lookup
            2. Match routes    → first (method, template) match wins
            3. No match        → 404 NotFound
            4. Bind params, call handler, normalize the result
            5. Serialize

        =====================================================================

        Args:
            raw: Raw request bytes.

        Returns:
            Serialized response bytes. Always a complete response.
        """
        try:
            request = self._parser.parse(raw)
        except RequestParseError as e:
            access_logger.warning(f"{e} -> 400")
            return to_response(e).to_bytes()

        response = self._dispatch(request)
        self._log_access(request, response)
        return response.to_bytes()

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        try:
            return self._router.dispatch(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            return internal_error()

    def _log_access(self, request: HTTPRequest, response: HTTPResponse) -> None:
        level = logging.WARNING if response.status.is_error else logging.INFO
        access_logger.log(
            level,
            f"{request.method} {request.path} -> {int(response.status)} "
            f"({len(response.body.encode('utf-8'))} bytes)",
        )

    def _handle_connection(self, conn: Connection) -> None:
        """
        Serve one connection: read once, respond, close.

        Runs inline on the accept loop, so the next connection is not
        accepted until this returns.
        """
        with conn:
            raw = conn.read_request()
            if not raw:
                logger.debug(f"[{conn.id}] Client sent nothing, closing")
                return
            conn.send_response(self.handle(raw))

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """
        Start serving (blocking).

        Freezes the route table, then accepts connections until shutdown()
        is called or SIGINT/SIGTERM arrives.

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            OSError: If the address cannot be bound.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._router.freeze()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"with {len(self._router)} routes"
        )
        for route in self._router.routes():
            logger.debug(f"  {route.method.value:7} {route.path}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def bind_and_run(self, address: str) -> None:
        """
        Start serving on a "host:port" address string.

            server.bind_and_run("127.0.0.1:8080")
        """
        host, _, port = address.rpartition(":")
        if not host or not port.isdigit():
            raise ValueError(f"Expected 'host:port', got {address!r}")
        self.run(host=host, port=int(port))

    def shutdown(self) -> None:
        """Ask the serving loop to stop after the current connection."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening (used by tests)."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self) -> None:
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minirouter").setLevel(level)


def create_app(config: Optional[ServerConfig] = None) -> Server:
    """
    Create a router server.

    Example:
        app = create_app(ServerConfig(port=3000))

        @app.get("/")
        def index(request):
            return "<h1>Hi</h1>"

        app.run()
    """
    return Server(config)
