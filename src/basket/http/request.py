"""
=============================================================================
HTTP REQUEST: PARSING, SERIALIZATION AND THE CLIENT BUILDER
=============================================================================

One class describes a request in both directions:

    CLIENT                                     SERVER
    ──────                                     ──────
    Request.post(url)          (builder)
        .json({"a": 1})
        .send()
            │
            └─► Request.write() ──bytes──►   Request.parse()
                                                 │
                                                 └─► Router.dispatch()

=============================================================================
REQUEST WIRE FORMAT
=============================================================================

    POST /users?page=2 HTTP/1.1\r\n       ◄── request line
    connection: close\r\n                 ◄── header block
    host: example.com\r\n
    content-type: application/json\r\n
    content-length: 8\r\n
    \r\n                                  ◄── end of headers
    {"a": 1}                              ◄── exactly content-length bytes

The request line is split at single spaces. A line with fewer than two
spaces is malformed, an unknown method token is rejected (no lowercase
acceptance), and any version other than HTTP/1.1 is unsupported.

Only Content-Length framing exists: no chunked bodies, no keep-alive.
Requests built here always carry ``connection: close``.
=============================================================================
"""

import logging
from enum import Enum
from typing import Any, BinaryIO, Iterable, List, Optional, Union
from urllib.parse import SplitResult, quote, urlsplit

from ..core.connection import DEFAULT_PORT, open_connection
from ..errors import (
    BasketError,
    InvalidEncodingError,
    InvalidURLError,
    MalformedMessageError,
    TransportError,
    UnknownMethodError,
)
from . import codecs, extract
from .headers import (
    CONNECTION,
    CONTENT_LENGTH,
    CONTENT_TYPE,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_PLAIN,
    CONTENT_TYPE_XML,
    CRLF,
    HOST,
    Header,
    parse_headers,
)
from .message import Message, read_body
from .response import Response


logger = logging.getLogger(__name__)


Body = Union[str, bytes, bytearray, memoryview]


class Method(Enum):
    """The six request methods basket understands."""

    DELETE = "DELETE"
    GET = "GET"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"
    POST = "POST"
    PUT = "PUT"

    @classmethod
    def from_token(cls, token: bytes) -> "Method":
        """
        Map an exact wire token to a Method.

        Raises:
            UnknownMethodError: For anything else, including "get".
        """
        try:
            return cls(token.decode("ascii"))
        except (UnicodeDecodeError, ValueError):
            raise UnknownMethodError(token) from None

    def __str__(self) -> str:
        return self.value


def encode_body(data: Body) -> bytes:
    """Text bodies are sent as UTF-8; byte-like bodies are copied as-is."""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def parse_url(url: str) -> SplitResult:
    """
    Split an absolute http:// URL.

    Raises:
        InvalidURLError: If the URL cannot be split, has a bad port, or
                         uses any scheme other than http.
    """
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError for a non-numeric or out-of-range port
    except ValueError as e:
        raise InvalidURLError(url, str(e)) from e

    if parts.scheme != "http":
        raise InvalidURLError(url, "only http:// URLs are supported")
    return parts


# Characters a request-target may carry unescaped. Existing "%XX" escapes
# are kept, so an already-encoded URL is not encoded twice.
PATH_SAFE = "/%:@!$&'()*+,;=-._~"
QUERY_SAFE = PATH_SAFE + "?"


def target_of(url: SplitResult) -> str:
    """
    Request-target for ``url``: path (default "/") plus "?query" if any.

    Spaces, control characters and non-ASCII text are percent-encoded
    (as UTF-8), so the target never breaks the request line:

        http://host/a b?q=café   ──►   /a%20b?q=caf%C3%A9
    """
    target = quote(url.path, safe=PATH_SAFE) or "/"
    if url.query:
        target += "?" + quote(url.query, safe=QUERY_SAFE)
    return target


class Request(Message):
    """
    An HTTP/1.1 request.

    Requests come from two places:

        Request.parse(stream)          inbound, target is opaque text
        RequestBuilder(...).build()    outbound, target derived from a URL

    Attributes are read-only; the body can be consumed once through
    bytes() / text() / json() / xml().
    """

    def __init__(
        self,
        method: Method,
        target: str = "/",
        headers: Iterable[Header] = (),
        body: Optional[bytes] = None,
        url: Optional[SplitResult] = None,
    ):
        super().__init__(headers, body)
        self._method = method
        self._target = target
        self._url = url

    # =========================================================================
    # BUILDER SHORTCUTS
    # =========================================================================

    @staticmethod
    def get(url: str) -> "RequestBuilder":
        return RequestBuilder(Method.GET, url)

    @staticmethod
    def post(url: str) -> "RequestBuilder":
        return RequestBuilder(Method.POST, url)

    @staticmethod
    def put(url: str) -> "RequestBuilder":
        return RequestBuilder(Method.PUT, url)

    @staticmethod
    def patch(url: str) -> "RequestBuilder":
        return RequestBuilder(Method.PATCH, url)

    @staticmethod
    def delete(url: str) -> "RequestBuilder":
        return RequestBuilder(Method.DELETE, url)

    @staticmethod
    def options(url: str) -> "RequestBuilder":
        return RequestBuilder(Method.OPTIONS, url)

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def method(self) -> Method:
        return self._method

    @property
    def target(self) -> str:
        """The request-target exactly as written on the request line."""
        return self._target

    @property
    def path(self) -> str:
        """Target up to (not including) the first "?"."""
        return self._target.partition("?")[0]

    @property
    def query(self) -> str:
        """Target after the first "?", or "" when there is none."""
        return self._target.partition("?")[2]

    @property
    def url(self) -> Optional[SplitResult]:
        """The URL an outbound request was built from; None for parsed requests."""
        return self._url

    def __repr__(self) -> str:
        return f"<Request {self._method.value} {self._target} headers={len(self._headers)}>"

    # =========================================================================
    # WIRE FORMAT
    # =========================================================================

    @classmethod
    def parse(cls, stream: BinaryIO) -> "Request":
        """
        Read exactly one request from ``stream``.

        Raises:
            MalformedMessageError: Bad request line, bad header line, or the
                                   stream ended early (including mid-body).
            UnknownMethodError: The method token is not one of Method.
            UnsupportedVersionError: The version is not HTTP/1.1.
            InvalidIntegerError: Content-Length is not an unsigned integer.
            InvalidEncodingError: Target or header text is not UTF-8.
        """
        line = extract.read_until(stream, CRLF)

        method_token, space, rest = line.partition(b" ")
        if not space:
            raise MalformedMessageError(f"request line without method separator: {line!r}")

        raw_target, space, version = rest.partition(b" ")
        if not space:
            raise MalformedMessageError(f"request line without target separator: {line!r}")

        method = Method.from_token(method_token)
        extract.check_http_version(version)

        try:
            target = raw_target.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncodingError(f"request target is not valid UTF-8: {e}") from e

        headers, content_length = parse_headers(stream)
        body = read_body(stream, content_length)
        return cls(method, target, headers, body)

    def write(self, stream: BinaryIO) -> None:
        """
        Serialize the request to ``stream``.

        Headers go out exactly as stored. Content-Length is never added
        here; RequestBuilder.build() takes care of it. The caller flushes.
        """
        stream.write(f"{self._method.value} {self._target} ".encode("utf-8"))
        stream.write(extract.HTTP_VERSION + CRLF)
        self._write_head_and_body(stream)

    # =========================================================================
    # CLIENT
    # =========================================================================

    def send(self) -> Response:
        """
        Send the request over a fresh connection and read the response.

        Connects to the first reachable address of the URL's host (port 80
        unless the URL names one), writes the request, reads one response
        and closes. No timeout, no retry, no redirects.

        Raises:
            InvalidURLError: If the request has no URL host to connect to.
            TransportError: If resolving, connecting, writing or reading fails.
            BasketError: Any parse error from Response.parse().
        """
        if self._url is None or not self._url.hostname:
            url = self._url.geturl() if self._url is not None else self._target
            raise InvalidURLError(url, "no host to connect to")

        host = self._url.hostname
        port = self._url.port
        logger.debug(f"Sending {self._method.value} {self._target} to {host}:{port or DEFAULT_PORT}")

        try:
            with open_connection(host, port) as conn:
                self.write(conn.writer)
                conn.writer.flush()
                response = Response.parse(conn.reader)
        except OSError as e:
            raise TransportError(f"{self._method.value} {self._url.geturl()} failed: {e}") from e

        logger.debug(f"Received {response.status} from {host}:{port or DEFAULT_PORT}")
        return response


class RequestBuilder:
    """
    Fluent construction of an outbound request.

        response = (
            Request.post("http://localhost:8080/users")
            .header("x-trace", "abc")
            .json({"name": "John"})
            .send()
        )

    Every step returns the builder. Failures that happen mid-chain (a bad
    URL, a payload the codec rejects) are stored instead of raised; once
    one is stored every further step does nothing, and build() / send()
    raise it.

    A new builder already carries ``connection: close`` and, when the URL
    has a host, ``host: <host>``.
    """

    def __init__(self, method: Method, url: str):
        self._method = method
        self._url: Optional[SplitResult] = None
        self._headers: List[Header] = [Header(CONNECTION, "close")]
        self._body: Optional[bytes] = None
        self._error: Optional[BasketError] = None

        try:
            self._url = parse_url(url)
        except InvalidURLError as e:
            self._error = e
            return

        if self._url.hostname:
            self._headers.append(Header(HOST, self._url.hostname))

    @property
    def error(self) -> Optional[BasketError]:
        """The stored deferred error, if any step failed."""
        return self._error

    def header(self, name: str, value: str) -> "RequestBuilder":
        """Append a header. Duplicates are kept; nothing is validated."""
        if self._error is None:
            self._headers.append(Header(name, value))
        return self

    def body(self, data: Body) -> "RequestBuilder":
        """Set a text body and append ``content-type: text/plain``."""
        if self._error is None:
            self._body = encode_body(data)
            self._headers.append(Header(CONTENT_TYPE, CONTENT_TYPE_PLAIN))
        return self

    def json(self, payload: Any) -> "RequestBuilder":
        """Encode ``payload`` as JSON and append ``content-type: application/json``."""
        return self._encoded(codecs.encode_json, payload, CONTENT_TYPE_JSON)

    def xml(self, payload: codecs.XmlPayload) -> "RequestBuilder":
        """Encode ``payload`` as XML and append ``content-type: application/xml``."""
        return self._encoded(codecs.encode_xml, payload, CONTENT_TYPE_XML)

    def _encoded(self, encode, payload: Any, content_type: str) -> "RequestBuilder":
        if self._error is not None:
            return self
        try:
            self._body = encode(payload)
        except BasketError as e:
            self._error = e
            return self
        self._headers.append(Header(CONTENT_TYPE, content_type))
        return self

    def build(self) -> Request:
        """
        Freeze the builder into a Request.

        A ``content-length`` header matching the body is appended (never
        replacing one added by hand). The builder itself is not modified,
        so build() can be called again.

        Raises:
            BasketError: The deferred error, if one was stored.
        """
        if self._error is not None:
            raise self._error

        headers = list(self._headers)
        if self._body is not None:
            headers.append(Header(CONTENT_LENGTH, str(len(self._body))))

        return Request(self._method, target_of(self._url), headers, self._body, self._url)

    def send(self) -> Response:
        """build() the request and send() it."""
        return self.build().send()
