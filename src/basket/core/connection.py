"""
=============================================================================
CONNECTION: ONE TCP SOCKET, ONE EXCHANGE
=============================================================================

Both sides of basket talk through a Connection. It wraps a connected
socket with a buffered reader and a buffered writer:

    ┌──────────────────────────────────────────────────────────────────┐
    │                           Connection                             │
    ├──────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   socket ──► reader  (socket.makefile("rb"), a BufferedReader)   │
    │          │     └── parsers pull bytes with read(n)               │
    │          │                                                       │
    │          └─► writer  (socket.makefile("wb"), a BufferedWriter)   │
    │                └── serializers write(); flush() sends it all     │
    │                                                                  │
    └──────────────────────────────────────────────────────────────────┘

The buffering matters: read_until() asks for one byte at a time, and
without a BufferedReader every one of those would be a recv() call.

A Connection carries exactly one request and one response, then closes.
There is no keep-alive, no timeout and no retry.

    CLIENT                                  SERVER
    open_connection(host, port)             listener.accept()
         │                                       │
         └─► write request ───────────────────►  parse request
             parse response ◄─────────────────── write response
             close()                             close()
=============================================================================
"""

import logging
import socket
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Tuple


logger = logging.getLogger(__name__)


DEFAULT_PORT = 80


@dataclass
class Connection:
    """
    A connected socket plus its buffered reader and writer.

    Attributes:
        socket: The connected socket.
        address: Peer address as returned by accept() or getaddrinfo().
        reader: Buffered binary stream for reading.
        writer: Buffered binary stream for writing.
    """

    socket: socket.socket
    address: Tuple
    reader: BinaryIO = field(init=False, repr=False)
    writer: BinaryIO = field(init=False, repr=False)
    closed: bool = field(default=False, init=False)

    def __post_init__(self):
        self.reader = self.socket.makefile("rb")
        self.writer = self.socket.makefile("wb")

    @property
    def peer(self) -> str:
        """Peer as "host:port", for log lines."""
        return f"{self.address[0]}:{self.address[1]}"

    def close(self):
        """
        Flush pending output and release the socket.

        The file objects returned by makefile() keep the socket open until
        they are closed too, so all three are closed here. Calling close()
        twice is harmless.
        """
        if self.closed:
            return
        self.closed = True

        try:
            self.writer.close()
        finally:
            self.reader.close()
            self.socket.close()
        logger.debug(f"Closed connection to {self.peer}")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def open_connection(host: str, port: Optional[int] = None) -> Connection:
    """
    Connect to the first reachable address of ``host``.

    ``host`` is resolved with getaddrinfo(); each candidate address is tried
    in order and the first successful connect() wins.

    Args:
        host: Host name or IP literal.
        port: TCP port; None means 80.

    Raises:
        OSError: If resolution fails or no address accepts the connection.
                 The error from the last attempt is raised.
    """
    port = DEFAULT_PORT if port is None else port
    last_error: Optional[OSError] = None

    for family, kind, proto, _, address in socket.getaddrinfo(host, port, type=socket.SOCK_STREAM):
        sock = socket.socket(family, kind, proto)
        try:
            sock.connect(address)
        except OSError as e:
            sock.close()
            last_error = e
            logger.debug(f"Connect to {address} failed: {e}")
            continue

        logger.debug(f"Connected to {host}:{port} via {address[0]}")
        return Connection(sock, address)

    if last_error is not None:
        raise last_error
    raise OSError(f"no addresses found for {host}:{port}")
