"""
=============================================================================
BLOCKING TCP SOCKET SERVER
=============================================================================

Listens for connections and hands them, one at a time, to a callback.

=============================================================================
SERVING MODEL
=============================================================================

Strictly sequential. The accept loop does not call accept() again until the
callback for the previous connection has returned:

    ┌──────────┐   ┌──────────────┐   ┌────────────┐   ┌──────────┐
    │ accept() │──►│ read request │──►│  dispatch  │──►│  write + │──┐
    └──────────┘   └──────────────┘   └────────────┘   │  close   │  │
         ▲                                             └──────────┘  │
         └───────────────────────────────────────────────────────────┘

A slow or stalled client therefore blocks every other client. There are no
per-request timeouts.

The listening socket itself has a 1-second accept() timeout so that the
loop notices shutdown() (called from a signal handler or another thread).

=============================================================================
SIGNALS
=============================================================================

SIGINT (Ctrl+C) and SIGTERM trigger a graceful stop: the current connection
is finished, then the loop exits and the socket is closed. Handlers are
only installed when running on the main thread (signal.signal() refuses
anywhere else) and the previous handlers are restored on exit.

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                data = conn.read_request()
                conn.send_response(b"...")

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    ACCEPT_TIMEOUT = 1.0

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server.

        Args:
            config: Server configuration (host, port, backlog, buffer_size).

        The socket is created in start(), not here.
        """
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is listening, so other threads can wait for it
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}
        self._bound_address: Optional[Tuple[str, int]] = None

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The server's address (IP, port).

        Once listening, this is the real bound address, so a config port of
        0 resolves to the port the OS picked.
        """
        return self._bound_address or (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Avoid "Address already in use" right after a restart
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(self.ACCEPT_TIMEOUT)
        return sock

    def _setup_signals(self):
        """Install SIGINT/SIGTERM handlers that call shutdown()."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread; leaving signal handlers alone")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop.

        This method BLOCKS until shutdown() is called.

        Args:
            connection_handler: Called with each accepted Connection. It runs
                on the accept loop's thread and must finish before the next
                connection is accepted.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until shutdown.

            while running:
                accept()            (or time out after 1s and re-check)
                Connection(...)
                connection_handler(conn)   ← blocks the loop
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                # Socket closed under us, usually during shutdown
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
            )

            try:
                connection_handler(conn)
            except OSError as e:
                # Client went away mid-response; only this connection is lost
                logger.warning(f"[{conn.id}] Connection error: {e}")
            finally:
                conn.close()

    def shutdown(self):
        """
        Stop the accept loop after the current connection.

        Safe to call from a signal handler or another thread, and more
        than once.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Restore signals and close the listening socket."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the socket to be listening.

        Returns:
            True if the server is listening, False on timeout.
        """
        return self._ready_event.wait(timeout)
