"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Everything a basket server needs before it can accept its first
connection lives in one dataclass:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Field      Default       Environment          Used by              │
    ├─────────────────────────────────────────────────────────────────────┤
    │  host       127.0.0.1     BASKET_HOST          create_listener()    │
    │  port       8080          BASKET_PORT          create_listener()    │
    │  backlog    128           BASKET_BACKLOG       listen()             │
    │  log_level  INFO          BASKET_LOG_LEVEL     setup_logging()      │
    └─────────────────────────────────────────────────────────────────────┘

Values are validated once, at startup, so a typo in BASKET_PORT fails
before the server binds anything.

There are no timeout, worker or keep-alive settings. The server handles
one connection at a time, one request per connection.
=============================================================================
"""

import os
from dataclasses import dataclass


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for serve().

    Development:
        ServerConfig(log_level="DEBUG")

    Tests (let the OS pick a free port):
        ServerConfig(port=0)
    """

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 8080
    """TCP port. 0 asks the OS for an ephemeral port."""

    backlog: int = 128
    """Maximum number of connections queued while one is being handled."""

    log_level: str = "INFO"
    """One of DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

            BASKET_PORT=3000 BASKET_LOG_LEVEL=DEBUG python examples/server.py

        Unset variables fall back to the defaults above.

        Raises:
            ValueError: If BASKET_PORT or BASKET_BACKLOG is not an integer.
        """
        return cls(
            host=os.getenv("BASKET_HOST", "127.0.0.1"),
            port=int(os.getenv("BASKET_PORT", "8080")),
            backlog=int(os.getenv("BASKET_BACKLOG", "128")),
            log_level=os.getenv("BASKET_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: Describing the first invalid field.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError(f"backlog must be >= 1, got {self.backlog}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level!r}. Must be one of {', '.join(LOG_LEVELS)}."
            )
