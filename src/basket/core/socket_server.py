"""
=============================================================================
LISTENING SOCKET
=============================================================================

The server side needs exactly one listening socket. Router.listen() then
calls accept() on it forever:

    1. socket()    create a TCP socket for the configured address family
    2. options     SO_REUSEADDR so a restart can rebind right away
                   TCP_NODELAY so small responses go out immediately
    3. bind()      reserve host:port (port 0 lets the OS pick one)
    4. listen()    start queueing connections, up to ``backlog``

accept() blocks with no timeout. Stopping the server means closing the
listener or killing the process; the loop ends on the resulting error.
=============================================================================
"""

import logging
import socket

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


def create_listener(config: ServerConfig) -> socket.socket:
    """
    Create, bind and start a listening socket for ``config``.

    Raises:
        OSError: If the address cannot be resolved or bound.
    """
    family, kind, proto, _, address = socket.getaddrinfo(
        config.host, config.port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
    )[0]

    sock = socket.socket(family, kind, proto)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.bind(address)
        sock.listen(config.backlog)
    except OSError:
        sock.close()
        raise

    host, port = sock.getsockname()[:2]
    logger.debug(f"Listening socket bound to {host}:{port} (backlog={config.backlog})")
    return sock


def accept_connection(listener: socket.socket) -> Connection:
    """
    Block until a client connects and wrap it in a Connection.

    Raises:
        OSError: If accept() fails (for example, the listener was closed).
    """
    client_socket, client_address = listener.accept()
    client_socket.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    return Connection(client_socket, client_address)
