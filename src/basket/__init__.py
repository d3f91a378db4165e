"""
=============================================================================
BASKET - A MINIMAL HTTP/1.1 CLIENT AND SERVER
=============================================================================

basket speaks just enough HTTP/1.1 to send a request and serve one:
a request line or status line, a header block, and a Content-Length
framed body, over a plain TCP connection that is closed after a single
exchange.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    basket/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # Command-line client (python -m basket)
    ├── server.py            # serve() and logging setup
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # BasketError hierarchy
    ├── access_log.py        # One log line per handled request
    ├── core/                # Sockets
    │   ├── connection.py    # Connection wrapper, client connect
    │   └── socket_server.py # Listening socket, accept
    └── http/                # Protocol
        ├── extract.py       # Byte-level read helpers
        ├── headers.py       # Header table parse / write
        ├── codecs.py        # JSON and XML bodies
        ├── message.py       # Shared header and body behaviour
        ├── request.py       # Request, Method, RequestBuilder
        ├── response.py      # Response, ResponseBuilder, into_response
        ├── status_codes.py  # Status names and reason phrases
        └── router.py        # Prefix router and accept loop

=============================================================================
QUICK START
=============================================================================

Client:

    from basket import Request

    response = Request.post("http://localhost:3000/echo").body("ping").send()
    print(response.status, response.text())

Server:

    from basket import Router, ServerConfig, serve

    def echo(state, request):
        return request.text()

    serve(Router().route("/echo", echo), ServerConfig(port=3000))
=============================================================================
"""

__version__ = "0.1.0"

from .config import ServerConfig
from .errors import (
    BasketError,
    CodecError,
    InvalidEncodingError,
    InvalidIntegerError,
    InvalidURLError,
    MalformedMessageError,
    MissingBodyError,
    TransportError,
    UnknownMethodError,
    UnsupportedVersionError,
)
from .http import (
    Header,
    HTTPStatus,
    Method,
    Request,
    RequestBuilder,
    Response,
    ResponseBuilder,
    Router,
    into_response,
)
from .server import serve

__all__ = [
    "BasketError",
    "CodecError",
    "Header",
    "HTTPStatus",
    "InvalidEncodingError",
    "InvalidIntegerError",
    "InvalidURLError",
    "MalformedMessageError",
    "Method",
    "MissingBodyError",
    "Request",
    "RequestBuilder",
    "Response",
    "ResponseBuilder",
    "Router",
    "ServerConfig",
    "TransportError",
    "UnknownMethodError",
    "UnsupportedVersionError",
    "into_response",
    "serve",
    "__version__",
]
