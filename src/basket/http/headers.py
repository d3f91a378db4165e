"""
=============================================================================
HTTP HEADER TABLE
=============================================================================

Headers are kept as an ORDERED LIST of (name, value) pairs, not a dict:

    content-type: text/plain        Header("content-type", "text/plain")
    set-cookie: a=1           ──►   Header("set-cookie", "a=1")
    set-cookie: b=2                 Header("set-cookie", "b=2")

A list keeps duplicates and the original order, so parsing a header block
and writing it back produces the same bytes.

=============================================================================
LINE FORMAT
=============================================================================

    name: value\r\n
        ─┬
         └── exactly ONE space after the first colon

Anything else ("name:value", "name:\tvalue", "name:  value") is rejected
as malformed instead of being normalized. The block ends at a bare CRLF.

Names read off the wire are lowercased once, at parse time. Names added
through a builder are stored exactly as given. Lookups compare names
case-insensitively, so both kinds are found the same way.
=============================================================================
"""

from dataclasses import dataclass
from typing import BinaryIO, Iterable, List, Optional, Sequence, Tuple

from ..errors import InvalidEncodingError, InvalidIntegerError, MalformedMessageError
from . import extract


# =============================================================================
# WELL-KNOWN NAMES AND VALUES
# =============================================================================

CONNECTION = "connection"
HOST = "host"
CONTENT_LENGTH = "content-length"
CONTENT_TYPE = "content-type"

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_XML = "application/xml"
CONTENT_TYPE_PLAIN = "text/plain"

CRLF = b"\r\n"


@dataclass(frozen=True)
class Header:
    """A single header line."""

    name: str
    value: str

    def to_bytes(self) -> bytes:
        return f"{self.name}: {self.value}".encode("utf-8") + CRLF


# Content-Length is read as an unsigned 64-bit integer.
MAX_CONTENT_LENGTH = 2**64 - 1

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def ascii_lower(name: str) -> str:
    """Lowercase A-Z only; every other character is left alone."""
    return name.translate(_ASCII_LOWER)


def _decode(raw: bytes, what: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(f"{what} is not valid UTF-8: {e}") from e


def parse_content_length(value: str) -> int:
    """
    Parse a Content-Length value as an unsigned decimal integer.

    Only ASCII digits are accepted: no sign, no whitespace, no underscores.

    Raises:
        InvalidIntegerError: If the value is not a valid unsigned integer
                             or is larger than 2**64 - 1.
    """
    if not value or not (value.isascii() and value.isdigit()):
        raise InvalidIntegerError(f"invalid content-length: {value!r}")

    # 2**64 - 1 is 20 digits long
    digits = value.lstrip("0") or "0"
    if len(digits) > 20 or int(digits) > MAX_CONTENT_LENGTH:
        raise InvalidIntegerError(f"content-length out of range: {value[:32]!r}")
    return int(digits)


def parse_header_line(line: bytes) -> Header:
    """
    Parse one header line (CRLF already stripped).

    Raises:
        MalformedMessageError: If the colon or the single space is missing.
        InvalidEncodingError: If the line is not UTF-8.
    """
    colon = line.find(b":")
    if colon == -1:
        raise MalformedMessageError(f"header line without colon: {line!r}")

    # Exactly one space; a second one means a padded separator
    if line[colon + 1:colon + 2] != b" " or line[colon + 2:colon + 3] == b" ":
        raise MalformedMessageError(f"header separator must be ': ', got {line!r}")

    name = ascii_lower(_decode(line[:colon], "header name"))
    value = _decode(line[colon + 2:], "header value")
    return Header(name, value)


def parse_headers(stream: BinaryIO) -> Tuple[List[Header], Optional[int]]:
    """
    Read a header block up to and including the terminating blank line.

    Returns:
        Tuple of (headers in wire order, Content-Length or None).

    Raises:
        MalformedMessageError: On a bad line or an early end of stream.
        InvalidIntegerError: If Content-Length is not an unsigned integer.
        InvalidEncodingError: If a line is not UTF-8.
    """
    headers: List[Header] = []
    content_length: Optional[int] = None

    while True:
        line = extract.read_until(stream, CRLF)
        if not line:
            break

        header = parse_header_line(line)
        if header.name == CONTENT_LENGTH:
            content_length = parse_content_length(header.value)

        headers.append(header)

    return headers, content_length


def write_headers(stream: BinaryIO, headers: Iterable[Header]) -> None:
    """
    Write each header as ``name: value\\r\\n`` in list order.

    The blank line that ends the block is written by the message, not here.
    """
    for header in headers:
        stream.write(header.to_bytes())


def find_header(headers: Sequence[Header], name: str) -> Optional[str]:
    """Return the value of the first header named ``name`` (any case), or None."""
    wanted = ascii_lower(name)
    for header in headers:
        if ascii_lower(header.name) == wanted:
            return header.value
    return None
