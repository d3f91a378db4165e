"""
=============================================================================
BYTE EXTRACTION PRIMITIVES
=============================================================================

The parsers in this package never see a complete message up front. They
pull bytes from a blocking stream (a socket file, a BufferedReader, or an
io.BytesIO in tests) a little at a time:

    HTTP/1.1 404 Not Found\r\n
    ───┬──── ┬ ─────┬──────────
       │     │      └── read_until(stream, b"\r\n")
       │     └───────── skip(stream, b" ")
       └─────────────── expect_http_version(stream)

TCP is a byte stream, not a message stream. A single read() may return
one byte or a thousand, so every helper here loops until it has exactly
what it needs, and treats an early end of stream as a malformed message.

=============================================================================
SCANNING FOR A DELIMITER
=============================================================================

read_until() appends one byte at a time and only compares the tail of the
buffer against the delimiter:

    buffer:    b"content-type: text/plain\r"   + b"\n"
                                         ───────────
                                         compare last len(delim) bytes

Each byte costs O(len(delimiter)), so a line of n bytes costs
O(n * len(delimiter)) in total instead of rescanning the whole buffer
after every byte. Wrap raw sockets in a BufferedReader so the one-byte
reads do not each become a system call.
=============================================================================
"""

from typing import BinaryIO

from ..errors import MalformedMessageError, UnsupportedVersionError


HTTP_VERSION = b"HTTP/1.1"

# Upper bound for one read() in read_exact(). A body is only buffered as
# fast as it actually arrives, whatever length the header promised.
READ_CHUNK = 64 * 1024


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """
    Read exactly ``size`` bytes, retrying short reads.

    Raises:
        MalformedMessageError: If the stream ends before ``size`` bytes arrive.
    """
    chunks = []
    remaining = size

    while remaining > 0:
        chunk = stream.read(min(remaining, READ_CHUNK))
        if not chunk:
            received = size - remaining
            raise MalformedMessageError(
                f"unexpected end of stream: expected {size} bytes, got {received}"
            )
        chunks.append(chunk)
        remaining -= len(chunk)

    return b"".join(chunks)


def skip(stream: BinaryIO, literal: bytes) -> None:
    """
    Consume ``literal`` from the stream.

    Raises:
        MalformedMessageError: If the next bytes differ from ``literal``.
    """
    found = read_exact(stream, len(literal))
    if found != literal:
        raise MalformedMessageError(f"expected {literal!r}, found {found!r}")


def read_until(stream: BinaryIO, delimiter: bytes) -> bytes:
    """
    Read up to and including ``delimiter``; return what came before it.

    Args:
        stream: Blocking binary stream.
        delimiter: Non-empty byte sequence to stop at. It is consumed
                   from the stream but not included in the result.

    Returns:
        All bytes preceding the first occurrence of ``delimiter``.

    Raises:
        MalformedMessageError: If the stream ends before the delimiter.
    """
    if not delimiter:
        raise ValueError("delimiter must not be empty")

    buffer = bytearray()
    width = len(delimiter)

    while True:
        byte = stream.read(1)
        if not byte:
            raise MalformedMessageError(
                f"unexpected end of stream while looking for {delimiter!r}"
            )
        buffer += byte

        # Only the newest `width` bytes can complete the delimiter
        if len(buffer) >= width and buffer[-width:] == delimiter:
            del buffer[-width:]
            return bytes(buffer)


def check_http_version(version: bytes) -> None:
    """
    Require an already-read version token to be exactly HTTP/1.1.

    Raises:
        UnsupportedVersionError: For HTTP/1.0, HTTP/2 or anything else.
    """
    if version != HTTP_VERSION:
        raise UnsupportedVersionError(version)


def expect_http_version(stream: BinaryIO) -> None:
    """
    Consume the protocol version and require it to be HTTP/1.1.

    Raises:
        UnsupportedVersionError: For HTTP/1.0, HTTP/2 or anything else.
        MalformedMessageError: If the stream ends first.
    """
    check_http_version(read_exact(stream, len(HTTP_VERSION)))
