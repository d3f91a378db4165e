"""
Unit tests for request parsing, serialization and RequestBuilder.
"""

import io

import pytest

from basket.errors import (
    CodecError,
    InvalidEncodingError,
    InvalidURLError,
    MalformedMessageError,
    MissingBodyError,
    TransportError,
    UnknownMethodError,
    UnsupportedVersionError,
)
from basket.http.headers import Header
from basket.http.request import Method, Request, RequestBuilder


class TestMethod:

    def test_exact_tokens(self):
        assert Method.from_token(b"PATCH") is Method.PATCH

    @pytest.mark.parametrize("token", [b"get", b"HEAD", b"", b"\xff"])
    def test_unknown_tokens(self, token):
        """Tokens are never coerced, lowercase included."""
        with pytest.raises(UnknownMethodError) as exc_info:
            Method.from_token(token)

        assert exc_info.value.token == token


class TestRequestParse:
    """Tests for Request.parse()."""

    def test_parse_get(self, sample_get_request):
        request = Request.parse(io.BytesIO(sample_get_request))

        assert request.method is Method.GET
        assert request.target == "/api/users?page=1&limit=10"
        assert request.path == "/api/users"
        assert request.query == "page=1&limit=10"
        assert request.headers == (Header("host", "localhost"), Header("connection", "close"))
        assert not request.has_body
        assert request.url is None

    def test_parse_post_body(self, sample_post_request):
        request = Request.parse(io.BytesIO(sample_post_request))

        assert request.method is Method.POST
        assert request.header("Content-Type") == "application/json"
        assert request.json() == {"name": "John", "age": 42}

    def test_body_consumed_once(self, sample_post_request):
        request = Request.parse(io.BytesIO(sample_post_request))
        request.bytes()

        with pytest.raises(MissingBodyError):
            request.text()

    def test_no_body_without_content_length(self):
        """Bytes after the header block are not read without content-length."""
        stream = io.BytesIO(b"GET / HTTP/1.1\r\n\r\nleftover")
        request = Request.parse(stream)

        assert not request.has_body
        assert stream.read() == b"leftover"

    def test_exact_body_with_one_byte_reads(self, trickle, sample_post_request):
        """Body bytes delivered one at a time are reassembled exactly."""
        request = Request.parse(trickle(sample_post_request))

        assert request.bytes() == b'{"name": "John", "age": 42}'

    def test_body_stops_at_content_length(self):
        stream = io.BytesIO(b"POST / HTTP/1.1\r\ncontent-length: 3\r\n\r\nabcdef")
        request = Request.parse(stream)

        assert request.bytes() == b"abc"
        assert stream.read() == b"def"

    def test_truncated_body(self):
        """An early end of stream inside the body is an error, not a short body."""
        stream = io.BytesIO(b"POST / HTTP/1.1\r\ncontent-length: 10\r\n\r\nabc")

        with pytest.raises(MalformedMessageError):
            Request.parse(stream)

    def test_missing_space_after_method(self):
        with pytest.raises(MalformedMessageError):
            Request.parse(io.BytesIO(b"GET/hello HTTP/1.1\r\n\r\n"))

    def test_missing_space_after_target(self):
        with pytest.raises(MalformedMessageError):
            Request.parse(io.BytesIO(b"GET /hello\r\n\r\n"))

    def test_unknown_method(self):
        with pytest.raises(UnknownMethodError):
            Request.parse(io.BytesIO(b"FETCH / HTTP/1.1\r\n\r\n"))

    def test_unsupported_version(self):
        with pytest.raises(UnsupportedVersionError):
            Request.parse(io.BytesIO(b"GET / HTTP/1.0\r\n\r\n"))

    def test_invalid_target_encoding(self):
        with pytest.raises(InvalidEncodingError):
            Request.parse(io.BytesIO(b"GET /\xff HTTP/1.1\r\n\r\n"))

    def test_empty_stream(self):
        with pytest.raises(MalformedMessageError):
            Request.parse(io.BytesIO(b""))


class TestRequestBuilder:
    """Tests for RequestBuilder."""

    def test_seeded_headers(self):
        request = Request.get("http://example.com/a?b=1").build()

        assert request.method is Method.GET
        assert request.target == "/a?b=1"
        assert request.headers == (Header("connection", "close"), Header("host", "example.com"))
        assert request.url.hostname == "example.com"

    def test_empty_path_becomes_slash(self):
        assert Request.get("http://example.com").build().target == "/"

    def test_shortcuts(self):
        url = "http://example.com/"
        assert Request.post(url).build().method is Method.POST
        assert Request.put(url).build().method is Method.PUT
        assert Request.patch(url).build().method is Method.PATCH
        assert Request.delete(url).build().method is Method.DELETE
        assert Request.options(url).build().method is Method.OPTIONS

    def test_text_body_wire_format(self):
        """content-type comes from body(); content-length from build()."""
        request = Request.post("http://example.com/echo").body("ping").build()
        out = io.BytesIO()
        request.write(out)

        assert out.getvalue() == (
            b"POST /echo HTTP/1.1\r\n"
            b"connection: close\r\n"
            b"host: example.com\r\n"
            b"content-type: text/plain\r\n"
            b"content-length: 4\r\n"
            b"\r\n"
            b"ping"
        )

    def test_no_content_length_without_body(self):
        request = Request.get("http://example.com/").build()

        assert request.header("content-length") is None

    def test_header_kept_verbatim(self):
        request = Request.get("http://example.com/").header("X-Trace", "abc").build()

        assert request.headers[-1] == Header("X-Trace", "abc")

    def test_json_body(self):
        request = Request.post("http://example.com/").json({"a": 1}).build()

        assert request.header("content-type") == "application/json"
        assert request.header("content-length") == "8"
        assert request.json() == {"a": 1}

    def test_xml_body(self):
        request = Request.post("http://example.com/").xml({"a": "b"}).build()

        assert request.header("content-type") == "application/xml"
        assert request.text() == "<a>b</a>"

    def test_codec_error_deferred(self):
        """A codec failure is stored, later steps do nothing, build() raises it."""
        builder = Request.post("http://example.com/").json(object())
        error = builder.error

        assert isinstance(error, CodecError)

        builder.body("ignored").header("x-ignored", "1")

        assert builder.error is error
        with pytest.raises(CodecError) as exc_info:
            builder.build()
        assert exc_info.value is error

    def test_build_is_repeatable(self):
        builder = Request.post("http://example.com/").body("x")

        first = builder.build()
        second = builder.build()

        assert first.headers == second.headers

    @pytest.mark.parametrize("url", [
        "https://example.com/",
        "ftp://example.com/",
        "example.com/path",
        "http://example.com:99999/",
        "http://example.com:port/",
    ])
    def test_invalid_urls_deferred(self, url):
        builder = RequestBuilder(Method.GET, url)

        assert isinstance(builder.error, InvalidURLError)
        with pytest.raises(InvalidURLError):
            builder.build()

    def test_target_is_percent_encoded(self):
        request = Request.get("http://example.com/a b/caf\u00e9?q=x y&t=\u00e9").build()

        assert request.target == "/a%20b/caf%C3%A9?q=x%20y&t=%C3%A9"

    def test_encoded_target_left_alone(self):
        assert Request.get("http://example.com/a%20b?c=%2F").build().target == "/a%20b?c=%2F"

    def test_target_with_space_round_trips(self):
        built = Request.get("http://example.com/my files/").build()
        out = io.BytesIO()
        built.write(out)

        parsed = Request.parse(io.BytesIO(out.getvalue()))

        assert parsed.path == "/my%20files/"

    def test_round_trip(self):
        """write() then parse() reproduces method, target, headers and body."""
        built = Request.put("http://example.com/items/7?force=1").header("x-a", "1").body("data").build()
        out = io.BytesIO()
        built.write(out)

        parsed = Request.parse(io.BytesIO(out.getvalue()))

        assert parsed.method is built.method
        assert parsed.target == built.target
        assert parsed.headers == built.headers
        assert parsed.bytes() == built.bytes()


class TestRequestSend:

    def test_connection_refused(self, free_port):
        """Nothing listening on the port surfaces as a TransportError."""
        with pytest.raises(TransportError) as exc_info:
            Request.get(f"http://127.0.0.1:{free_port}/").send()

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_send_without_url(self):
        with pytest.raises(InvalidURLError):
            Request(Method.GET, "/").send()

    def test_builder_error_raised_before_connecting(self):
        with pytest.raises(InvalidURLError):
            Request.get("https://example.com/").send()
