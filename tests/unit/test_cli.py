"""
Unit tests for the command-line client.
"""

import argparse

import pytest

from basket.__main__ import build_parser, build_request, format_response, main, parse_header
from basket.errors import CodecError
from basket.http.headers import Header
from basket.http.request import Method
from basket.http.response import ResponseBuilder
from basket.http.router import Router


class TestParseHeader:

    def test_split_at_first_colon(self):
        assert parse_header("Host: localhost:8080") == ("Host", "localhost:8080")

    def test_leading_whitespace_trimmed(self):
        assert parse_header("  Accept:   text/plain") == ("Accept", "text/plain")

    def test_trailing_whitespace_kept(self):
        assert parse_header("X-A: 1 ") == ("X-A", "1 ")

    def test_missing_colon(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_header("no colon")


class TestBuildRequest:

    def test_method_is_case_insensitive(self):
        args = build_parser().parse_args(["POST", "http://example.com/"])

        assert args.method is Method.POST

    def test_unknown_method_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["fetch", "http://example.com/"])

        assert exc_info.value.code == 2

    def test_text_data(self):
        args = build_parser().parse_args(["post", "http://example.com/", "-d", "hi"])
        request = build_request(args).build()

        assert request.header("content-type") == "text/plain"
        assert request.text() == "hi"

    def test_json_data(self):
        args = build_parser().parse_args(["post", "http://example.com/", "-j", "-d", '{"a": 1}'])
        request = build_request(args).build()

        assert request.header("content-type") == "application/json"
        assert request.json() == {"a": 1}

    def test_invalid_json_data(self):
        args = build_parser().parse_args(["post", "http://example.com/", "-j", "-d", "{bad"])

        with pytest.raises(CodecError):
            build_request(args)

    def test_headers_appended_in_order(self):
        args = build_parser().parse_args(
            ["get", "http://example.com/", "-H", "X-A: 1", "-H", "X-B: 2"]
        )
        request = build_request(args).build()

        assert request.headers[-2:] == (Header("X-A", "1"), Header("X-B", "2"))


class TestFormatResponse:

    def test_status_headers_body(self):
        response = ResponseBuilder().status(404).body("nope").build()

        assert format_response(response) == "HTTP/1.1 404 Not Found\ncontent-length: 4\n\nnope"

    def test_no_body(self):
        response = ResponseBuilder().status(204).build()

        assert format_response(response) == "HTTP/1.1 204 No Content\n"


class TestMain:

    def test_prints_response(self, serve_router, capsys):
        server = serve_router(Router().route("/echo", lambda state, request: request.text()))

        code = main(["post", f"{server.url}/echo", "-d", "ping"])

        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("HTTP/1.1 200 OK\n")
        assert "server: basket\n" in out
        assert out.endswith("\nping\n")

    def test_sends_headers(self, serve_router, capsys):
        server = serve_router(Router().route("/", lambda state, request: request.header("x-trace")))

        assert main(["get", f"{server.url}/", "-H", "X-Trace:  abc"]) == 0
        assert capsys.readouterr().out.endswith("\nabc\n")

    def test_failure_exit_code(self, free_port, capsys):
        code = main(["get", f"http://127.0.0.1:{free_port}/"])

        assert code == 1
        assert capsys.readouterr().err.startswith("basket: ")
