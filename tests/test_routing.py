"""
Tests for the endpoint router.
"""

import pytest

from relayer.actions import ApiDefinition, ResponseAction
from relayer.errors import MethodFault, NotFoundFault
from relayer.events import Event
from relayer.routing import EndpointRouter


def _respond(event, secret, previous):
    return ResponseAction(body="ok")


@pytest.fixture
def router():
    api = ApiDefinition(api_name="relayer", api_version="v1")
    api.register_function("text", _respond)
    api.register_function("secret", _respond, methods=["GET", "POST"])
    api.register_function("next1", _respond)
    return EndpointRouter.for_api(api)


class TestEndpointRouter:
    """Tests for EndpointRouter."""

    def test_exact_match(self, router):
        event = Event(path="/relayer/v1/text")
        assert router.resolve_endpoint_name(event) == "text"

    def test_trailing_slash(self, router):
        assert router.resolve_endpoint_name(Event(path="/relayer/v1/next1/")) == "next1"

    def test_api_name_added_when_stripped(self, router):
        assert router.resolve_endpoint_name(Event(path="/v1/next1")) == "next1"

    def test_method_allowed(self, router):
        event = Event(path="/relayer/v1/secret", http_method="POST")
        assert router.resolve_endpoint_name(event) == "secret"

    def test_method_not_allowed(self, router):
        event = Event(path="/relayer/v1/text", http_method="POST")

        with pytest.raises(MethodFault) as exc_info:
            router.resolve_endpoint_name(event)

        assert exc_info.value.status_code == 400
        assert exc_info.value.endpoint == "text"

    def test_unknown_path(self, router):
        with pytest.raises(NotFoundFault) as exc_info:
            router.resolve_endpoint_name(Event(path="/relayer/v1/unknown"))

        assert exc_info.value.status_code == 404
        assert "|/relayer/v1/unknown|" in exc_info.value.message
        assert "basePath: |/relayer/v1/|" in exc_info.value.message

    def test_prefix_is_not_a_match(self, router):
        with pytest.raises(NotFoundFault):
            router.resolve_endpoint_name(Event(path="/relayer/v1/text/extra"))

    def test_missing_path(self, router):
        with pytest.raises(NotFoundFault):
            router.resolve_endpoint_name(Event(path=None))

    def test_route_returns_decision(self, router):
        decision = router.route(Event(path="/relayer/v1/next1"))

        assert decision.endpoint == "next1"
        assert decision.path == "/relayer/v1/next1"
        assert decision.to_dict()["http_method"] == "GET"
