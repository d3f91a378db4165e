"""HTTP/1.1 message model, wire format and routing."""

from .headers import Header
from .request import Method, Request, RequestBuilder
from .response import Response, ResponseBuilder, into_response
from .router import Router
from .status_codes import HTTPStatus

__all__ = [
    "Header",
    "HTTPStatus",
    "Method",
    "Request",
    "RequestBuilder",
    "Response",
    "ResponseBuilder",
    "Router",
    "into_response",
]
