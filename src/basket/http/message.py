"""
=============================================================================
MESSAGE BASE
=============================================================================

Behaviour shared by Request and Response: an ordered header list, an
optional body, and the accessors that hand the body to the caller.

=============================================================================
BODY OWNERSHIP
=============================================================================

A body can be taken out of a message exactly once:

    response.bytes()   ──►  b"ping"
    response.text()    ──►  MissingBodyError

Every accessor (bytes, text, json, xml) removes the body from the message
before returning it, so a second call can never hand back stale or
duplicated data. ``has_body`` tells you whether a body is still there.
=============================================================================
"""

import xml.etree.ElementTree as ET
from typing import Any, BinaryIO, Iterable, Optional, Tuple

from ..errors import InvalidEncodingError, MissingBodyError
from . import codecs, extract
from .headers import CRLF, Header, find_header, write_headers


class Message:
    """Headers plus an optional body that can be consumed once."""

    def __init__(self, headers: Iterable[Header] = (), body: Optional[bytes] = None):
        self._headers: Tuple[Header, ...] = tuple(headers)
        self._body: Optional[bytes] = bytes(body) if body is not None else None

    # =========================================================================
    # HEADERS
    # =========================================================================

    @property
    def headers(self) -> Tuple[Header, ...]:
        """All headers in wire order (read-only)."""
        return self._headers

    def header(self, name: str) -> Optional[str]:
        """
        Get the first header named ``name``.

        The lookup is case-insensitive:

            response.header("Content-Type") == response.header("content-type")
        """
        return find_header(self._headers, name)

    # =========================================================================
    # BODY
    # =========================================================================

    @property
    def has_body(self) -> bool:
        """True while a body is present and has not been consumed."""
        return self._body is not None

    @property
    def body_length(self) -> int:
        """Size of the body still present, 0 once consumed or when absent."""
        return len(self._body) if self._body is not None else 0

    def _take_body(self) -> bytes:
        body = self._body
        if body is None:
            raise MissingBodyError()
        self._body = None
        return body

    def bytes(self) -> bytes:
        """
        Take the raw body.

        Raises:
            MissingBodyError: If there is no body (or it was already taken).
        """
        return self._take_body()

    def text(self) -> str:
        """
        Take the body as UTF-8 text.

        Raises:
            MissingBodyError: If there is no body (or it was already taken).
            InvalidEncodingError: If the body is not valid UTF-8.
        """
        body = self._take_body()
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncodingError(f"body is not valid UTF-8: {e}") from e

    def json(self) -> Any:
        """
        Take the body and parse it as JSON.

        Raises:
            MissingBodyError: Before the codec is called, if there is no body.
            CodecError: Wrapping the json module's error.
        """
        return codecs.decode_json(self._take_body())

    def xml(self) -> ET.Element:
        """
        Take the body and parse it as XML, returning the root element.

        Raises:
            MissingBodyError: Before the codec is called, if there is no body.
            InvalidEncodingError: If the body is not valid UTF-8.
            CodecError: Wrapping ElementTree's ParseError.
        """
        return codecs.decode_xml(self.text())

    # =========================================================================
    # SERIALIZATION HELPERS
    # =========================================================================

    def _write_head_and_body(self, stream: BinaryIO) -> None:
        # headers, blank line, then body bytes if any
        write_headers(stream, self._headers)
        stream.write(CRLF)
        if self._body is not None:
            stream.write(self._body)


def read_body(stream: BinaryIO, content_length: Optional[int]) -> Optional[bytes]:
    """Read exactly ``content_length`` body bytes, or nothing when it is None."""
    if content_length is None:
        return None
    return extract.read_exact(stream, content_length)
