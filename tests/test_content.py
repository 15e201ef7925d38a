"""Tests for content negotiation, body encoding and body formatting."""

import json

import pytest

from xcurl.content import (
    ContentType,
    encode_body,
    format_body,
    request_content_type,
    response_content_type,
)
from xcurl.errors import MalformedBody, UnsupportedEncoding

# ── request_content_type ─────────────────────────────────────────────────


class TestRequestContentType:
    def test_default_json(self):
        headers = {}
        assert request_content_type(headers) == "application/json"
        assert headers == {"content-type": "application/json"}

    def test_form_flag(self):
        headers = {}
        assert request_content_type(headers, form=True) == "application/x-www-form-urlencoded"
        assert headers["content-type"] == "application/x-www-form-urlencoded"

    def test_multipart_flag(self):
        headers = {}
        assert request_content_type(headers, multipart=True) == "multipart/form-data"

    def test_form_wins_over_multipart(self):
        headers = {}
        request_content_type(headers, form=True, multipart=True)
        assert headers["content-type"] == "application/x-www-form-urlencoded"

    def test_explicit_header_wins(self):
        headers = {"content-type": "text/plain"}
        assert request_content_type(headers, form=True) == "text/plain"
        assert headers == {"content-type": "text/plain"}

    def test_explicit_header_any_case(self):
        headers = {"Content-Type": "application/xml"}
        assert request_content_type(headers) == "application/xml"
        assert len(headers) == 1


# ── response_content_type ────────────────────────────────────────────────


class TestResponseContentType:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("application/json", ContentType.JSON),
            ("application/json; charset=utf-8", ContentType.JSON),
            ("text/html;charset=UTF-8", ContentType.HTML),
            (" application/xml ", ContentType.XML),
            ("text/xml", ContentType.XML),
            ("text/plain", ContentType.TEXT),
            ("application/x-www-form-urlencoded", ContentType.FORM_URLENCODED),
            ("image/png", ContentType.JSON),
        ],
    )
    def test_match(self, value, expected):
        assert response_content_type({"Content-Type": value}) is expected

    def test_absent_defaults_to_json(self):
        assert response_content_type({}) is ContentType.JSON


# ── encode_body ──────────────────────────────────────────────────────────


class TestEncodeBody:
    BODY = (("a", "1"), ("b", "2"))

    def test_json_compact(self):
        assert encode_body(self.BODY, "application/json") == b'{"a":"1","b":"2"}'

    def test_json_last_duplicate_wins(self):
        encoded = encode_body((("a", "1"), ("a", "2")), ContentType.JSON)
        assert json.loads(encoded) == {"a": "2"}

    def test_json_ignores_charset_param(self):
        assert encode_body(self.BODY, "application/json; charset=utf-8") == b'{"a":"1","b":"2"}'

    def test_json_unicode(self):
        assert encode_body((("name", "zoë"),), ContentType.JSON) == '{"name":"zoë"}'.encode()

    def test_form(self):
        assert encode_body(self.BODY, "application/x-www-form-urlencoded") == b"a=1&b=2"

    def test_multipart_uses_query_string(self):
        assert encode_body(self.BODY, ContentType.MULTIPART) == b"a=1&b=2"

    def test_form_repeated_keys_and_brackets(self):
        body = (("tag", "a"), ("tag", "b"), ("user[name]", "bob smith"), ("ids[1]", "7"))
        assert encode_body(body, ContentType.FORM_URLENCODED) == (
            b"tag=a&tag=b&user[name]=bob+smith&ids[1]=7"
        )

    @pytest.mark.parametrize("mime", ["application/xml", "text/plain", "text/html", "image/png"])
    def test_unsupported(self, mime):
        with pytest.raises(UnsupportedEncoding) as exc:
            encode_body(self.BODY, mime)
        assert exc.value.content_type == mime
        assert mime in str(exc.value)

    def test_unsupported_enum(self):
        with pytest.raises(UnsupportedEncoding, match="application/xml"):
            encode_body(self.BODY, ContentType.XML)


# ── format_body ──────────────────────────────────────────────────────────


class TestFormatBody:
    def test_no_body(self):
        assert format_body(None, ContentType.JSON) == ("", None)
        assert format_body("", ContentType.HTML) == ("", None)

    def test_json_pretty(self):
        kind, text = format_body('{"a":1,"b":[1,2]}', ContentType.JSON)
        assert kind == "json"
        assert text == '{\n  "a": 1,\n  "b": [\n    1,\n    2\n  ]\n}'

    def test_json_malformed(self):
        with pytest.raises(MalformedBody):
            format_body("<html></html>", ContentType.JSON)

    @pytest.mark.parametrize(
        "ct,kind",
        [
            (ContentType.XML, "xml"),
            (ContentType.HTML, "html"),
            (ContentType.TEXT, "txt"),
            (ContentType.FORM_URLENCODED, "txt"),
            (ContentType.MULTIPART, "txt"),
        ],
    )
    def test_passthrough(self, ct, kind):
        assert format_body("<x> a=1 </x>", ct) == (kind, "<x> a=1 </x>")
