"""
=============================================================================
PREFIX ROUTER AND ACCEPT LOOP
=============================================================================

A Router maps path prefixes to handlers and runs the server loop:

    router = (
        Router(state)
        .route("/hello", hello)
        .route("/", index)
    )
    router.listen(create_listener(config))

=============================================================================
MATCHING
=============================================================================

Routes are tried in registration order and the FIRST prefix that the
request path starts with wins. There are no parameters, no methods and no
"longest match":

    ┌──────────────────────────────────────────────────────────────────┐
    │  path           normalized      /hello     /                     │
    ├──────────────────────────────────────────────────────────────────┤
    │  /hello         /hello          MATCH                            │
    │  /hello/        /hello          MATCH      (one trailing / gone) │
    │  /hello/world   /hello/world    MATCH                            │
    │  /helloworld    /helloworld     MATCH      (plain string prefix) │
    │  /other         /other                     MATCH                 │
    │  /              /                          MATCH                 │
    └──────────────────────────────────────────────────────────────────┘

Register specific prefixes before general ones: "/" matches everything.
No match gives a 404 with no body. Every response gets ``server: basket``.

=============================================================================
HANDLERS AND STATE
=============================================================================

A handler is any callable ``handler(state, request)``. Each call gets a
shallow copy of the router's state, so rebinding attributes on it does
not leak into later requests. Objects the state refers to (a dict, a
counter, a database handle) are shared; guarding them is up to them.

The return value goes through into_response(), so a handler can return
a Response, text, bytes, None, a status code or (status, body).

=============================================================================
THE LOOP
=============================================================================

    while True:
        accept()  ──►  parse one request  ──►  dispatch  ──►  write  ──►  close

One connection at a time, one request per connection. The first error of
any kind (a malformed request, a client that hung up, a failing handler)
is logged and re-raised, which ends the loop. listen() never returns
normally.
=============================================================================
"""

import copy
import logging
import socket
import time
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Generic, List, NoReturn, Optional, TypeVar

from ..access_log import RequestLog, log_request
from ..core.connection import Connection
from ..core.socket_server import accept_connection
from ..errors import BasketError, TransportError
from .request import Request
from .response import Response, ResponseBuilder, into_response
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


SERVER_NAME = "basket"

S = TypeVar("S")
Handler = Callable[[Any, Request], Any]


@dataclass(frozen=True)
class Route:
    prefix: str
    handler: Handler


def normalize_path(path: str) -> str:
    """Drop one trailing "/" unless the path is just "/"."""
    if len(path) > 1 and path.endswith("/"):
        return path[:-1]
    return path


def close_connection(conn: Connection) -> None:
    """
    Close an accepted connection.

    Raises:
        TransportError: If flushing or closing the socket fails.
    """
    try:
        conn.close()
    except OSError as e:
        logger.error(f"Closing connection to {conn.peer} failed: {e}")
        raise TransportError(f"closing connection to {conn.peer} failed: {e}") from e


class Router(Generic[S]):
    """
    Ordered prefix routes plus the state handed to every handler.

    Args:
        state: Any object. Each handler call receives copy.copy(state).
    """

    def __init__(self, state: S = None):
        self._state = state
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        """Registered routes in matching order (a copy)."""
        return list(self._routes)

    def route(self, prefix: str, handler: Handler) -> "Router[S]":
        """Append a route. Returns the router so calls can be chained."""
        self._routes.append(Route(prefix, handler))
        return self

    def match(self, path: str) -> Optional[Route]:
        """First route whose prefix starts the normalized ``path``, or None."""
        path = normalize_path(path)
        for route in self._routes:
            if path.startswith(route.prefix):
                return route
        return None

    # =========================================================================
    # ONE EXCHANGE
    # =========================================================================

    def dispatch(self, request: Request) -> Response:
        """
        Run the matching handler and return its response.

        Raises:
            Whatever the handler raises, and TypeError or BasketError from
            converting its return value.
        """
        route = self.match(request.path)
        if route is None:
            response = ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()
        else:
            response = into_response(route.handler(copy.copy(self._state), request))

        return ResponseBuilder.from_response(response).header("server", SERVER_NAME).build()

    def handle(self, reader: BinaryIO, writer: BinaryIO, client: str = "-") -> Response:
        """
        Parse one request from ``reader``, dispatch it, write the response.

        Returns:
            The response that was written (its body already sent).

        Raises:
            TransportError: If reading from ``reader`` or writing to
                            ``writer`` fails.
            BasketError: If the request cannot be parsed.
            Exception: Anything the handler raises, under its own type.
        """
        try:
            request = Request.parse(reader)
        except OSError as e:
            raise TransportError(f"reading request from {client} failed: {e}") from e

        start = time.perf_counter()
        response = self.dispatch(request)
        duration_ms = (time.perf_counter() - start) * 1000

        try:
            response.write(writer)
            writer.flush()
        except OSError as e:
            raise TransportError(f"writing response to {client} failed: {e}") from e

        log_request(RequestLog(
            client=client,
            method=request.method.value,
            target=request.target,
            status=response.status,
            content_length=response.body_length,
            duration_ms=duration_ms,
        ))
        return response

    # =========================================================================
    # ACCEPT LOOP
    # =========================================================================

    def listen(self, listener: socket.socket) -> NoReturn:
        """
        Accept and serve connections forever, one at a time.

        Raises:
            TransportError: accept(), read, write or close failed.
            BasketError: A request could not be parsed.
            Exception: Anything a handler raised.
        """
        while True:
            try:
                conn = accept_connection(listener)
            except OSError as e:
                logger.error(f"Accept failed: {e}")
                raise TransportError(f"accept failed: {e}") from e

            logger.debug(f"Accepted connection from {conn.peer}")

            try:
                self.handle(conn.reader, conn.writer, client=conn.peer)
            except BasketError as e:
                logger.error(f"Failed to serve {conn.peer}: {e}")
                raise
            except Exception:
                logger.exception(f"Handler failed for {conn.peer}")
                raise
            finally:
                close_connection(conn)
