"""Socket plumbing: client connections and the listening socket."""

from .connection import Connection, open_connection
from .socket_server import accept_connection, create_listener

__all__ = ["Connection", "accept_connection", "create_listener", "open_connection"]
