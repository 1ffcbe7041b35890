"""
Tests for Relayer faults, secret scrubbing and error responses.
"""

import json
import logging

import pytest

from relayer.errors import (
    SECRET_PLACEHOLDER,
    AuthorizationFault,
    ConfigurationFault,
    Fault,
    InvalidBodyFault,
    MethodFault,
    NotFoundFault,
    UpstreamFault,
    error_response,
    scrub_secrets,
)
from relayer.events import Event


class TestFaults:
    """Tests for the fault hierarchy."""

    @pytest.mark.parametrize(
        "fault_class,expected",
        [
            (Fault, 500),
            (ConfigurationFault, 500),
            (NotFoundFault, 404),
            (MethodFault, 400),
            (InvalidBodyFault, 400),
            (UpstreamFault, 500),
            (AuthorizationFault, 403),
        ],
    )
    def test_default_status(self, fault_class, expected):
        assert fault_class("boom").status_code == expected

    def test_explicit_status_wins(self):
        fault = UpstreamFault("timeout", status_code=504)
        assert fault.status_code == 504

    def test_all_faults_are_fault(self):
        for cls in (ConfigurationFault, NotFoundFault, MethodFault, UpstreamFault):
            assert issubclass(cls, Fault)

    def test_str_includes_endpoint(self):
        fault = ConfigurationFault("exceeded 10 hops", endpoint="next1")
        assert str(fault) == "[next1] exceeded 10 hops"
        assert fault.message == "exceeded 10 hops"

    def test_str_without_endpoint(self):
        assert str(NotFoundFault("path not found")) == "path not found"


class TestScrubSecrets:
    """Tests for scrub_secrets()."""

    def test_replaces_every_occurrence(self):
        message = "login abc123 failed, retry abc123"
        result = scrub_secrets({"password": "abc123"}, message)
        assert result == "login SECRET failed, retry SECRET"

    def test_replaces_every_value(self):
        secret = {"user": "alice-admin", "password": "pw-999"}
        result = scrub_secrets(secret, "alice-admin:pw-999")
        assert "alice-admin" not in result
        assert "pw-999" not in result
        assert result == f"{SECRET_PLACEHOLDER}:{SECRET_PLACEHOLDER}"

    def test_empty_secret_leaves_message(self):
        assert scrub_secrets({}, "nothing to hide") == "nothing to hide"
        assert scrub_secrets(None, "nothing to hide") == "nothing to hide"

    def test_non_string_values_ignored(self):
        result = scrub_secrets({"port": 5432, "empty": ""}, "port 5432")
        assert result == "port 5432"


class TestErrorResponse:
    """Tests for error_response()."""

    def test_fault_status_and_body(self):
        record = error_response(NotFoundFault("path not found"))

        assert record.status_code == 404
        assert record.headers == {"Content-Type": "text/json"}
        assert json.loads(record.body) == {"code": 404, "message": "path not found"}

    def test_body_is_compact_json(self):
        record = error_response(MethodFault("nope"))
        assert record.body == '{"code":400,"message":"nope"}'

    def test_plain_exception_is_500(self):
        record = error_response(RuntimeError("kaput"))
        assert record.status_code == 500
        assert json.loads(record.body)["message"] == "kaput"

    def test_message_is_scrubbed(self):
        secret = {"token": "tok-4242"}
        record = error_response(UpstreamFault("bad token tok-4242"), secret=secret)

        body = json.loads(record.body)
        assert "tok-4242" not in record.body
        assert body["message"] == "bad token SECRET"

    def test_500_logs_scrubbed_event(self, caplog):
        secret = {"token": "tok-4242"}
        event = Event(path="/relayer/v1/secret", body={"token": "tok-4242"})

        with caplog.at_level(logging.ERROR, logger="relayer.errors"):
            error_response(ConfigurationFault("boom"), event=event, secret=secret)

        assert "event data" in caplog.text
        assert "/relayer/v1/secret" in caplog.text
        assert "tok-4242" not in caplog.text

    def test_non_500_not_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger="relayer.errors"):
            error_response(NotFoundFault("missing"), event=Event(path="/x"))

        assert caplog.text == ""
