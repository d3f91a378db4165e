"""
=============================================================================
BASKET ERRORS
=============================================================================

Every failure the client or the server can report is one of the
exceptions below. They all derive from BasketError, so callers that only
care about "did the exchange work?" can catch a single type:

    try:
        response = Request.get("http://localhost:8080/").send()
    except BasketError as e:
        print(f"request failed: {e}")

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │  Exception               │ Raised when                              │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │  TransportError          │ connect / read / write / accept failed   │
    │  MalformedMessageError   │ bytes on the wire are not HTTP/1.1       │
    │  UnsupportedVersionError │ version is anything but HTTP/1.1         │
    │  UnknownMethodError      │ request method is not one we know        │
    │  InvalidIntegerError     │ status or Content-Length is not a number │
    │  InvalidEncodingError    │ header or body text is not UTF-8         │
    │  MissingBodyError        │ body requested but absent (or consumed)  │
    │  CodecError              │ JSON / XML encoding or decoding failed   │
    │  InvalidURLError         │ URL cannot be used for a request         │
    └──────────────────────────┴──────────────────────────────────────────┘

There is no recovery and no retry anywhere in basket: the first error
aborts the operation that hit it.
=============================================================================
"""

from typing import Optional


class BasketError(Exception):
    """Base class for every error raised by basket."""


class TransportError(BasketError):
    """
    An I/O operation on the underlying socket failed.

    The original OSError is kept as ``__cause__``.
    """


class MalformedMessageError(BasketError):
    """
    The byte stream does not follow the HTTP/1.1 message grammar.

    Covers a missing delimiter, a header line without ": ", and a stream
    that ends in the middle of a message.
    """


class UnsupportedVersionError(BasketError):
    """The message carries a version other than HTTP/1.1."""

    def __init__(self, version: bytes):
        super().__init__(f"only HTTP/1.1 is supported, got {version!r}")
        self.version = version


class UnknownMethodError(BasketError):
    """The request line names a method outside DELETE/GET/OPTIONS/PATCH/POST/PUT."""

    def __init__(self, token: bytes):
        super().__init__(f"unknown method: {token!r}")
        self.token = token


class InvalidIntegerError(BasketError):
    """A status code or Content-Length value is not a valid unsigned integer."""


class InvalidEncodingError(BasketError):
    """Header or body text is not valid UTF-8."""


class MissingBodyError(BasketError):
    """
    A body accessor was called on a message without a body.

    Bodies are consumed by the accessors, so calling a second accessor on
    the same message also raises this.
    """

    def __init__(self, message: str = "expected body"):
        super().__init__(message)


class CodecError(BasketError):
    """
    A structured payload codec failed.

    The codec's own exception is available unchanged as ``error`` (and as
    ``__cause__`` when raised from a decode call).
    """

    def __init__(self, codec: str, error: Exception):
        super().__init__(f"{codec} error: {error}")
        self.codec = codec
        self.error = error


class InvalidURLError(BasketError):
    """The URL cannot be parsed or does not use the http scheme."""

    def __init__(self, url: str, reason: Optional[str] = None):
        message = f"invalid url: {url!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.url = url
