"""
Socket-level components: the blocking accept loop and the per-client
connection wrapper. Nothing here knows about HTTP.
"""

from .connection import Connection
from .socket_server import SocketServer

__all__ = ["Connection", "SocketServer"]
