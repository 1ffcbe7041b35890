"""
Tests for the response normalizer.
"""

import base64
import json

import pytest

from relayer.engine import (
    RawOutcome,
    ResponseRecord,
    ReturnType,
    content_type_for_return_type,
    normalize,
    return_type_for_content_type,
)
from relayer.errors import ConfigurationFault


class TestReturnTypeMapping:
    """Tests for content type -> return type inference."""

    @pytest.mark.parametrize(
        "content_type,expected",
        [
            ("application/json", ReturnType.JSON),
            ("text/json", ReturnType.JSON),
            ("application/xml", ReturnType.XML),
            ("text/xml", ReturnType.XML),
            ("text/plain", ReturnType.TEXT),
            ("text/html", ReturnType.HTML),
            ("application/json; charset=utf-8", ReturnType.JSON),
            ("TEXT/HTML", ReturnType.HTML),
            ("application/pdf", ReturnType.JSON),
            (None, ReturnType.JSON),
            ("", ReturnType.JSON),
        ],
    )
    def test_return_type_for_content_type(self, content_type, expected):
        assert return_type_for_content_type(content_type) is expected

    @pytest.mark.parametrize(
        "return_type,expected",
        [
            (ReturnType.TEXT, "text/plain"),
            (ReturnType.JSON, "text/json"),
            (ReturnType.HTML, "text/html"),
            (ReturnType.XML, "text/xml"),
            ("json", "text/json"),
        ],
    )
    def test_canonical_content_type(self, return_type, expected):
        assert content_type_for_return_type(return_type) == expected

    def test_unknown_return_type_is_fatal(self):
        with pytest.raises(ConfigurationFault):
            content_type_for_return_type("pdf")


class TestNormalize:
    """Tests for normalize()."""

    def test_structured_body_serialized_compact(self):
        record = normalize(
            RawOutcome(
                headers={"content-type": "application/json"},
                body={"name": "x", "items": [1, 2]},
            )
        )

        assert record.body == '{"name":"x","items":[1,2]}'
        assert record.headers == {"Content-Type": "text/json"}
        assert record.status_code == 200

    def test_structured_body_forces_json(self):
        record = normalize(
            RawOutcome(headers={"Content-Type": "text/plain"}, body={"currentAction": 1})
        )

        assert record.content_type == "text/json"
        assert json.loads(record.body) == {"currentAction": 1}

    def test_string_body_untouched(self):
        record = normalize(RawOutcome(headers={"Content-Type": "text/plain"}, body="hello"))

        assert record.body == "hello"
        assert record.headers == {"Content-Type": "text/plain"}

    def test_html_canonicalized(self):
        record = normalize(
            RawOutcome(headers={"Content-Type": "text/html; charset=utf-8"}, body="<p>hi</p>")
        )
        assert record.headers["Content-Type"] == "text/html"

    def test_application_xml_becomes_text_xml(self):
        record = normalize(RawOutcome(headers={"Content-Type": "application/xml"}, body="<a/>"))
        assert record.headers["Content-Type"] == "text/xml"

    def test_missing_content_type_defaults_to_json(self):
        record = normalize(RawOutcome(body="plain"))
        assert record.headers == {"Content-Type": "text/json"}

    def test_declared_type_wins_over_header(self):
        record = normalize(
            RawOutcome(
                headers={"Content-Type": "text/html"},
                body="text",
                content_type="text/plain",
            )
        )
        assert record.headers["Content-Type"] == "text/plain"

    def test_other_headers_kept(self):
        record = normalize(
            RawOutcome(headers={"X-Request-Id": "abc", "CONTENT-TYPE": "text/plain"}, body="ok")
        )
        assert record.headers == {"X-Request-Id": "abc", "Content-Type": "text/plain"}

    def test_missing_status_becomes_200(self):
        record = normalize(RawOutcome(body="ok", status_code=None))
        assert record.status_code == 200

    def test_status_preserved(self):
        record = normalize(RawOutcome(body="Test Failed", status_code=500))
        assert record.status_code == 500

    def test_none_body_is_empty_string(self):
        assert normalize(RawOutcome(body=None)).body == ""

    def test_utf8_bytes_decoded(self):
        record = normalize(RawOutcome(headers={"Content-Type": "text/plain"}, body="héllo".encode()))
        assert record.body == "héllo"
        assert not record.is_base64_encoded

    def test_binary_base64_encoded(self):
        data = b"\xff\xd8\xff\xe0jpeg"
        record = normalize(
            RawOutcome(body=data, content_type="image/jpeg", binary=True)
        )

        assert record.is_base64_encoded
        assert base64.b64decode(record.body) == data
        assert record.headers["Content-Type"] == "image/jpeg"

    def test_undecodable_bytes_become_binary(self):
        record = normalize(RawOutcome(body=b"\xff\xfe\xfd"))

        assert record.is_base64_encoded
        assert record.headers["Content-Type"] == "application/octet-stream"

    def test_normalizing_twice_is_noop(self):
        outcomes = [
            RawOutcome(headers={"content-type": "application/json"}, body={"a": [1, 2]}),
            RawOutcome(headers={"Content-Type": "text/html"}, body="<b>x</b>"),
            RawOutcome(body=b"\x00\xff", content_type="image/png", binary=True),
        ]
        for outcome in outcomes:
            once = normalize(outcome)
            assert normalize(once) == once

    def test_boundary_shape(self):
        boundary = normalize(RawOutcome(headers={"Content-Type": "text/plain"}, body="hi")).to_boundary()
        assert boundary == {
            "statusCode": 200,
            "headers": {"Content-Type": "text/plain"},
            "body": "hi",
        }

    def test_boundary_shape_binary(self):
        boundary = normalize(RawOutcome(body=b"\x00", binary=True)).to_boundary()
        assert boundary["isBase64Encoded"] is True


class TestResponseRecord:
    def test_content_type_lookup_is_case_insensitive(self):
        record = ResponseRecord(headers={"content-type": "text/plain"})
        assert record.content_type == "text/plain"
