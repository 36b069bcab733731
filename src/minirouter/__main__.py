"""
=============================================================================
MINIROUTER CLI ENTRY POINT
=============================================================================

Runs a small demo application on the router.

=============================================================================
USAGE
=============================================================================

    # Run with defaults (127.0.0.1:8080)
    python -m minirouter

    # Custom port
    python -m minirouter --port 3000

    # Listen on all interfaces (for containers)
    python -m minirouter --host 0.0.0.0

Environment variables (MINIROUTER_HOST, MINIROUTER_PORT, ...) are read
first; command-line flags override them.

=============================================================================
DEMO ROUTES
=============================================================================

    GET /                 {"msg":"hello world"}            application/json
    GET /greet/{name}     Hello <name>, nice to meet you!  text/html
    GET /greet?name=...   same greeting, name from the query string

=============================================================================
"""

import argparse
import logging
import sys

from . import __version__
from .config import ServerConfig
from .http import HTTPRequest, HTTPResponse, bad_request
from .server import Server


logger = logging.getLogger(__name__)


def build_demo_app(config: ServerConfig) -> Server:
    """Create a Server with the demo routes registered."""
    server = Server(config)

    @server.get("/")
    def index(request: HTTPRequest):
        return HTTPResponse().set_json('{"msg":"hello world"}')

    @server.get("/greet/{name}")
    def greet(request: HTTPRequest):
        return f"Hello {request.get_param('name')}, nice to meet you!"

    @server.get("/greet")
    def greet_query(request: HTTPRequest):
        name = request.get_query("name")
        if name is None:
            return bad_request("missing query parameter 'name'")
        return f"Hello {name}, nice to meet you!"

    return server


def main(argv=None):
    """
    Main CLI entry point.

    =========================================================================
    ARGUMENTS
    =========================================================================

        --host, -H         Server host
        --port, -p         Server port
        --buffer-size, -b  Max request bytes read per connection
        --log-level, -l    Logging verbosity
        --version, -v      Show version

    =========================================================================
    """
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment configuration: {e}", file=sys.stderr)
        return 1

    parser = argparse.ArgumentParser(
        prog="minirouter",
        description="Minimal HTTP/1.1 request router on raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minirouter                      # Run with defaults
  python -m minirouter --port 3000          # Custom port
  python -m minirouter --host 0.0.0.0       # Listen on all interfaces
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--buffer-size", "-b",
        type=int,
        default=defaults.buffer_size,
        help=f"Maximum request size in bytes (default: {defaults.buffer_size})"
    )

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help="Logging level (default: INFO)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minirouter {__version__}"
    )

    args = parser.parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        buffer_size=args.buffer_size,
        log_level=args.log_level,
    )

    try:
        server = build_demo_app(config)
        server.run()
    except (OSError, ValueError) as e:
        logger.error(f"Failed to start: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
