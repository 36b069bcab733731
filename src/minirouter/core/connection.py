"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response cycle:

    accept() ──► read_request() ──► send_response() ──► close()
                 one recv(),         sendall()           shutdown + close
                 ≤ buffer_size

There is no keep-alive: the connection is closed after the response.

=============================================================================
TRUNCATION
=============================================================================

read_request() calls recv() ONCE. A request larger than buffer_size, or one
that arrives split over several TCP segments, is cut at whatever the first
recv() returned. The router only needs the request line, which fits in the
first segment for any realistic client, but a very long query string can
lose its tail.

=============================================================================
"""

import logging
import socket
import uuid
from dataclasses import dataclass, field


logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """
    One client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        buffer_size: Maximum bytes read for the request.
        id: Short identifier used in log lines.
    """

    socket: socket.socket
    address: tuple
    buffer_size: int = 5120
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    closed: bool = False

    def __post_init__(self):
        # Blocking I/O; the server handles one connection at a time
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    def read_request(self) -> bytes:
        """
        Read the raw request.

        Returns:
            Up to ``buffer_size`` bytes, or b"" if the client closed the
            connection without sending anything.
        """
        try:
            data = self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

        if len(data) == self.buffer_size:
            logger.warning(
                f"[{self.id}] Request filled the {self.buffer_size}-byte buffer; "
                f"anything beyond it was dropped"
            )
        return data

    def send_response(self, data: bytes) -> None:
        """
        Send the full response.

        Raises:
            OSError: If the client went away. Fatal to this connection only;
                the socket server logs it and moves on.
        """
        self.socket.sendall(data)

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self.closed:
            return

        try:
            # Sends FIN so the client sees end-of-response
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.close()
        except OSError:
            pass

        self.closed = True
        logger.debug(f"[{self.id}] Connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
