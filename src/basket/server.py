"""
=============================================================================
SERVER ENTRY POINT
=============================================================================

serve() wires configuration, logging, the listening socket and a Router
together:

    ServerConfig ──► setup_logging(level)
         │
         └──────► create_listener(config) ──► router.listen(listener)
                                                   │
                                                   └── runs until the first error

    from basket import Router, ServerConfig, serve

    router = Router().route("/", lambda state, request: "hello")
    serve(router, ServerConfig(port=3000))
=============================================================================
"""

import logging
from typing import NoReturn, Optional

from .config import ServerConfig
from .core.socket_server import create_listener
from .http.router import Router


logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger and the ``basket`` logger level."""
    numeric = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    logging.getLogger("basket").setLevel(numeric)


def serve(router: Router, config: Optional[ServerConfig] = None) -> NoReturn:
    """
    Bind a listener from ``config`` and run ``router`` on it forever.

    Args:
        router: Routes and state to serve.
        config: Defaults to ServerConfig.from_env().

    Raises:
        ValueError: If the configuration is invalid.
        OSError: If the address cannot be bound.
        BasketError: The error that ended the accept loop.
    """
    config = config or ServerConfig.from_env()
    config.validate()
    setup_logging(config.log_level)

    listener = create_listener(config)
    host, port = listener.getsockname()[:2]
    logger.info(f"Listening on http://{host}:{port}")

    try:
        router.listen(listener)
    finally:
        listener.close()
        logger.info("Server stopped")
