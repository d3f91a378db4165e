"""
=============================================================================
HTTP RESPONSE: PARSING, SERIALIZATION AND THE SERVER BUILDER
=============================================================================

    HTTP/1.1 200 OK\r\n                   ◄── status line
    content-length: 4\r\n                 ◄── header block
    content-type: text/plain\r\n
    server: basket\r\n
    \r\n                                  ◄── end of headers
    ping                                  ◄── exactly content-length bytes

=============================================================================
THE STATUS LINE
=============================================================================

Writing always produces version, code and reason phrase separated by
single spaces. The phrase comes from status_codes and is empty for codes
it does not know, so the second space is always there:

    HTTP/1.1 404 Not Found\r\n
    HTTP/1.1 599 \r\n

Reading only cares about the code. Everything after the first space that
follows it is discarded, and a line with no reason phrase at all
("HTTP/1.1 200\r\n") is accepted too.

=============================================================================
BUILDING RESPONSES IN HANDLERS
=============================================================================

Handlers can build a Response explicitly:

    Response.builder().status(201).json({"id": 7}).build()

or return something simpler and let into_response() convert it:

    ┌──────────────────────┬───────────────────────────────────────────┐
    │  Handler returns     │  Response                                 │
    ├──────────────────────┼───────────────────────────────────────────┤
    │  Response            │  itself                                   │
    │  "text" / b"bytes"   │  200 with that body                       │
    │  None                │  204, no body                             │
    │  418                 │  418, no body                             │
    │  (201, "created")    │  201 with the converted body              │
    └──────────────────────┴───────────────────────────────────────────┘
=============================================================================
"""

from typing import Any, BinaryIO, Iterable, List, Optional, Union

from ..errors import BasketError, InvalidIntegerError
from . import codecs, extract
from .headers import (
    CONTENT_LENGTH,
    CONTENT_TYPE,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_XML,
    CRLF,
    Header,
    parse_headers,
)
from .message import Message, read_body
from .status_codes import HTTPStatus, reason_phrase


MAX_STATUS = 0xFFFF


def parse_status(token: bytes) -> int:
    """
    Parse a status code as an unsigned 16-bit integer.

    Raises:
        InvalidIntegerError: If the token is empty, not all ASCII digits,
                             or larger than 65535.
    """
    if not token or not (token.isascii() and token.isdigit()):
        raise InvalidIntegerError(f"invalid status code: {token!r}")
    digits = token.lstrip(b"0") or b"0"
    if len(digits) > 5:
        raise InvalidIntegerError(f"status code out of range: {token[:32]!r}")

    status = int(digits)
    if status > MAX_STATUS:
        raise InvalidIntegerError(f"status code out of range: {status}")
    return status


class Response(Message):
    """An HTTP/1.1 response: integer status, ordered headers, optional body."""

    def __init__(
        self,
        status: int = HTTPStatus.OK,
        headers: Iterable[Header] = (),
        body: Optional[bytes] = None,
    ):
        super().__init__(headers, body)
        self._status = int(status)

    @staticmethod
    def builder() -> "ResponseBuilder":
        return ResponseBuilder()

    @property
    def status(self) -> int:
        return self._status

    def __repr__(self) -> str:
        return f"<Response {self._status} headers={len(self._headers)}>"

    @classmethod
    def parse(cls, stream: BinaryIO) -> "Response":
        """
        Read exactly one response from ``stream``.

        Raises:
            UnsupportedVersionError: The version is not HTTP/1.1.
            MalformedMessageError: Bad status line or header line, or the
                                   stream ended early.
            InvalidIntegerError: Status code or Content-Length is not a
                                 valid unsigned integer.
            InvalidEncodingError: Header text is not UTF-8.
        """
        extract.expect_http_version(stream)
        extract.skip(stream, b" ")

        # "200 OK", "404 Not Found" or just "200"
        rest = extract.read_until(stream, CRLF)
        status = parse_status(rest.partition(b" ")[0])

        headers, content_length = parse_headers(stream)
        body = read_body(stream, content_length)
        return cls(status, headers, body)

    def write(self, stream: BinaryIO) -> None:
        """
        Serialize the response to ``stream``.

        Headers go out exactly as stored; nothing is added. The caller
        flushes.
        """
        status_line = f"{self._status} {reason_phrase(self._status)}".encode("utf-8")
        stream.write(extract.HTTP_VERSION + b" " + status_line + CRLF)
        self._write_head_and_body(stream)


class ResponseBuilder:
    """
    Fluent construction of a Response.

    Starts as status 200 with no headers and no body. body() appends a
    matching ``content-length`` header immediately; json() and xml() also
    append their content type. A status outside 0-65535 or a codec failure
    is stored, turns every later step into a no-op, and is raised by build().
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._headers: List[Header] = []
        self._body: Optional[bytes] = None
        self._error: Optional[BasketError] = None

    @classmethod
    def from_response(cls, response: Response) -> "ResponseBuilder":
        """
        Reopen a built response so more headers can be appended.

        The body is moved into the builder, not copied, so the original
        response should not be used afterwards.
        """
        builder = cls()
        builder._status = response.status
        builder._headers = list(response.headers)
        builder._body = response._body
        response._body = None
        return builder

    @property
    def error(self) -> Optional[BasketError]:
        """The stored deferred error, if any step failed."""
        return self._error

    def status(self, code: int) -> "ResponseBuilder":
        """
        Set the status code.

        A code outside 0-65535 could not be written or parsed back; it is
        stored as an InvalidIntegerError for build() to raise.
        """
        if self._error is not None:
            return self
        if not 0 <= code <= MAX_STATUS:
            self._error = InvalidIntegerError(f"status code must be 0-65535, got {code}")
            return self
        self._status = int(code)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Append a header. Duplicates are kept; nothing is validated."""
        if self._error is None:
            self._headers.append(Header(name, value))
        return self

    def body(self, data: Union[str, bytes, bytearray, memoryview]) -> "ResponseBuilder":
        """Set the body and append its ``content-length``."""
        if self._error is None:
            self._body = data.encode("utf-8") if isinstance(data, str) else bytes(data)
            self._headers.append(Header(CONTENT_LENGTH, str(len(self._body))))
        return self

    def json(self, payload: Any) -> "ResponseBuilder":
        """Encode ``payload`` as the JSON body."""
        return self._encoded(codecs.encode_json, payload, CONTENT_TYPE_JSON)

    def xml(self, payload: codecs.XmlPayload) -> "ResponseBuilder":
        """Encode ``payload`` as the XML body."""
        return self._encoded(codecs.encode_xml, payload, CONTENT_TYPE_XML)

    def _encoded(self, encode, payload: Any, content_type: str) -> "ResponseBuilder":
        if self._error is not None:
            return self
        try:
            encoded = encode(payload)
        except BasketError as e:
            self._error = e
            return self
        return self.body(encoded).header(CONTENT_TYPE, content_type)

    def build(self) -> Response:
        """
        Freeze the builder into a Response.

        Raises:
            BasketError: The deferred error, if one was stored.
        """
        if self._error is not None:
            raise self._error
        return Response(self._status, self._headers, self._body)


def into_response(value: Any) -> Response:
    """
    Convert a handler's return value into a Response.

    Raises:
        TypeError: For values with no conversion.
        BasketError: A deferred error stored in a returned ResponseBuilder,
                     or InvalidIntegerError for a status outside 0-65535.
    """
    if isinstance(value, Response):
        return value

    if isinstance(value, ResponseBuilder):
        return value.build()

    if value is None:
        return ResponseBuilder().status(HTTPStatus.NO_CONTENT).build()

    if isinstance(value, (str, bytes, bytearray, memoryview)):
        return ResponseBuilder().body(value).build()

    if isinstance(value, int) and not isinstance(value, bool):
        return ResponseBuilder().status(value).build()

    if isinstance(value, tuple) and len(value) == 2 and isinstance(value[0], int):
        status, payload = value
        inner = into_response(payload)
        builder = ResponseBuilder().status(status)
        if inner.has_body:
            builder.body(inner.bytes())
        return builder.build()

    raise TypeError(f"cannot convert {type(value).__name__} to a Response")
