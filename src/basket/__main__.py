"""
=============================================================================
BASKET COMMAND-LINE CLIENT
=============================================================================

Send one request and print the response:

    python -m basket get http://localhost:3000/hello
    python -m basket post http://localhost:3000/echo --data "ping"
    python -m basket post http://localhost:3000/ --json --data '{"name": "John", "age": 42}'
    python -m basket get http://localhost:3000/ -H "Accept: text/plain" -H "X-Trace: 1"

Output is the status line, the headers and the body text:

    HTTP/1.1 200 OK
    content-length: 5
    server: basket

    hello

Exit status is 0 when a response was received (whatever its status), 1
when the request failed, and 2 for bad arguments.
=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from . import __version__
from .errors import BasketError
from .http import codecs
from .http.request import Method, RequestBuilder
from .http.response import Response
from .http.status_codes import reason_phrase
from .server import setup_logging


logger = logging.getLogger("basket.cli")


def parse_header(value: str) -> Tuple[str, str]:
    """
    Split a -H argument at the first colon.

    Leading whitespace is trimmed from both parts:

        >>> parse_header("Accept:  text/plain")
        ('Accept', 'text/plain')
    """
    name, colon, rest = value.partition(":")
    if not colon:
        raise argparse.ArgumentTypeError(f"header must look like 'Name: value', got {value!r}")
    return name.lstrip(), rest.lstrip()


def parse_method(value: str) -> Method:
    try:
        return Method[value.upper()]
    except KeyError:
        choices = ", ".join(m.value.lower() for m in Method)
        raise argparse.ArgumentTypeError(f"unknown method {value!r} (choose from {choices})") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="basket",
        description="A simple HTTP/1.1 client.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  basket get http://example.com
  basket post http://example.com --data "Hello, world!"
  basket post http://example.com --json --data '{"message": "Hello, world!"}'
        """,
    )

    parser.add_argument("method", metavar="METHOD", type=parse_method,
                        help="delete, get, options, patch, post or put")
    parser.add_argument("url", metavar="URL", help="http:// URL to request")
    parser.add_argument("--data", "-d", default=None,
                        help="Request body (sent as text/plain unless --json)")
    parser.add_argument("--json", "-j", action="store_true",
                        help="Parse --data as JSON and send it as application/json")
    parser.add_argument("--header", "-H", dest="headers", action="append", default=[],
                        type=parse_header, metavar="'NAME: VALUE'",
                        help="Extra request header (repeatable)")
    parser.add_argument("--log-level", "-l",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        default="WARNING",
                        help="Logging level (default: WARNING)")
    parser.add_argument("--version", "-v", action="version", version=f"basket {__version__}")
    return parser


def build_request(args: argparse.Namespace) -> RequestBuilder:
    """Turn parsed arguments into a request builder."""
    request = RequestBuilder(args.method, args.url)

    if args.data is not None:
        if args.json:
            request = request.json(codecs.decode_json(args.data.encode("utf-8")))
        else:
            request = request.body(args.data)

    for name, value in args.headers:
        request = request.header(name, value)

    return request


def format_response(response: Response) -> str:
    """Status line, headers, blank line and the body text (consumes the body)."""
    lines = [f"HTTP/1.1 {response.status} {reason_phrase(response.status)}".rstrip()]
    lines.extend(f"{header.name}: {header.value}" for header in response.headers)
    lines.append("")
    if response.has_body:
        lines.append(response.text())
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        response = build_request(args).send()
        output = format_response(response)
    except BasketError as e:
        logger.debug("Request failed", exc_info=True)
        print(f"basket: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
