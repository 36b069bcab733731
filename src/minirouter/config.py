"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the router's serving loop.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m minirouter --port 3000                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIROUTER_PORT=3000 python -m minirouter                 │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
import os
from dataclasses import dataclass


ENV_PREFIX = "MINIROUTER_"


@dataclass
class ServerConfig:
    """
    Configuration for the router's socket server.

    Development:
        ServerConfig(port=8080, log_level="DEBUG")

    Tests:
        ServerConfig(port=0)    # OS picks a free port
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """Port to listen on. 0 lets the OS choose a free port."""

    backlog: int = 128
    """Maximum number of queued connections waiting for accept()."""

    buffer_size: int = 5120
    """
    Maximum request size in bytes, read with a single recv().
    Anything beyond this is truncated, not streamed: a long query string
    can be cut off mid-parameter.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "minirouter"
    """Name shown in the startup log line."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        MINIROUTER_HOST         Server host (default: 127.0.0.1)
        MINIROUTER_PORT         Server port (default: 8080)
        MINIROUTER_BUFFER_SIZE  Max request bytes (default: 5120)
        MINIROUTER_LOG_LEVEL    Logging level (default: INFO)

        Raises:
            ValueError: If a numeric variable is not an integer.
        """
        defaults = cls()
        return cls(
            host=os.getenv(f"{ENV_PREFIX}HOST", defaults.host),
            port=int(os.getenv(f"{ENV_PREFIX}PORT", str(defaults.port))),
            buffer_size=int(os.getenv(f"{ENV_PREFIX}BUFFER_SIZE", str(defaults.buffer_size))),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called when the Server is constructed, so a bad value fails at
        startup rather than on the first request.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 64:
            raise ValueError("buffer_size must be >= 64")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
