"""
Tests for Relayer events and payload helpers.
"""

import pytest

from relayer.errors import InvalidBodyFault
from relayer.events import Event, convert_body_data, convert_to_json, parse_query_string


class TestEventFromMapping:
    """Tests for Event.from_mapping()."""

    def test_api_gateway_event(self, sample_event_data):
        event = Event.from_mapping(sample_event_data)

        assert event.path == "/relayer/v1/text"
        assert event.http_method == "GET"
        assert event.query_parameters == {}
        assert event.headers == {"Accept": "*/*"}
        assert event.body is None

    def test_query_parameters_alias(self):
        event = Event.from_mapping({"path": "/a", "queryParameters": {"region": "eu-west-1"}})
        assert event.query("region") == "eu-west-1"

    def test_method_upper_cased(self):
        event = Event.from_mapping({"path": "/a", "httpMethod": "post"})
        assert event.http_method == "POST"

    def test_missing_method_defaults_to_get(self):
        assert Event.from_mapping({"path": "/a"}).http_method == "GET"

    def test_json_string_body_decoded(self):
        event = Event.from_mapping({"path": "/a", "body": '{"key": "value"}'})
        assert event.body == {"key": "value"}

    def test_plain_string_body_kept(self):
        event = Event.from_mapping({"path": "/a", "body": "not json"})
        assert event.body == "not json"

    def test_event_is_immutable(self):
        event = Event(path="/a")
        with pytest.raises(AttributeError):
            event.path = "/b"

    def test_to_dict_hides_bytes(self):
        event = Event(path="/a", body=b"\x00\x01\x02")
        assert event.to_dict()["body"] == "<3 bytes>"

    def test_query_default(self):
        assert Event(path="/a").query("missing", "fallback") == "fallback"


class TestParseQueryString:
    """Tests for parse_query_string()."""

    def test_leading_question_mark(self):
        assert parse_query_string("?a=1&b=2") == {"a": "1", "b": "2"}

    def test_plus_and_percent_decoding(self):
        assert parse_query_string("name=hello+world&path=%2Fdocs") == {
            "name": "hello world",
            "path": "/docs",
        }

    def test_empty(self):
        assert parse_query_string("") == {}
        assert parse_query_string(None) == {}

    def test_key_without_value(self):
        assert parse_query_string("flag") == {"flag": ""}


class TestConvertBodyData:
    """Tests for convert_body_data()."""

    def test_json_bytes(self):
        assert convert_body_data(b'{"a": 1}') == {"a": 1}

    def test_chunks_joined(self):
        assert convert_body_data([b'{"a"', b": 1}"]) == {"a": 1}

    def test_text_bytes(self):
        assert convert_body_data(b"plain text") == "plain text"

    def test_binary_bytes_kept(self):
        data = b"\xff\xd8\xff\xe0"
        assert convert_body_data(data) == data

    def test_empty(self):
        assert convert_body_data(b"") is None
        assert convert_body_data(None) is None


class TestConvertToJson:
    """Tests for convert_to_json()."""

    def test_none_is_empty_object(self):
        assert convert_to_json(None) == {}

    def test_string_parsed(self):
        assert convert_to_json('[1, 2]') == [1, 2]

    def test_structured_unchanged(self):
        value = {"a": 1}
        assert convert_to_json(value) is value

    def test_invalid_string_raises(self):
        with pytest.raises(InvalidBodyFault) as exc_info:
            convert_to_json("{not json")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "delivered JSON is not parsable"
