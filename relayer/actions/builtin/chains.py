"""
Multi-hop resolvers.

Each resolver documents its continuation sequence. The marker on the
previous ChainState tells the resolver which step it is on; nothing else
is remembered between hops.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ...errors import UpstreamFault
from ..descriptors import ActionDescriptor, RequestAction, ResponseAction
from ..resolver import ActionResolver, Secret

if TYPE_CHECKING:
    from ...engine.records import ChainState
    from ...events import Event

logger = logging.getLogger(__name__)

REQRES_USER_URL = "https://reqres.in/api/users/2"
PLACEHOLDER_ITEM_URL = "https://jsonplaceholder.typicode.com/todos/1"
USER_URL = "https://jsonplaceholder.typicode.com/users/1"


def _field(previous: ChainState, *keys: str) -> Any:
    """Walk into the previous structured body, failing as an upstream fault."""
    try:
        value = previous.json()
    except ValueError as e:
        raise UpstreamFault(f"upstream body is not JSON: {e}") from e

    for key in keys:
        if not isinstance(value, dict) or key not in value:
            raise UpstreamFault(f"upstream body missing |{'.'.join(keys)}|")
        value = value[key]
    return value


class FetchFieldResolver(ActionResolver):
    """
    Two hops: fetch a JSON document, then answer with one of its fields.

    Sequence:
        None -> Request(url), continuation 1
        1    -> Response({"currentAction": 1, "name": <field>})
    """

    def __init__(
        self,
        name: str,
        url: str,
        field_path: tuple[str, ...],
        content_type: str = "text/json",
    ):
        self._name = name
        self.url = url
        self.field_path = field_path
        self.content_type = content_type

    @property
    def name(self) -> str:
        return self._name

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> ActionDescriptor:
        if previous is None:
            return RequestAction(url=self.url, name=self._name, continuation=1)

        return ResponseAction(
            headers={"Content-Type": self.content_type},
            body={
                "currentAction": previous.continuation,
                "name": _field(previous, *self.field_path),
            },
        )


def next1() -> FetchFieldResolver:
    """First name of a reqres.in user."""
    return FetchFieldResolver(
        "next1",
        REQRES_USER_URL,
        ("data", "first_name"),
        content_type="text/plain",
    )


def next_action1() -> FetchFieldResolver:
    """Title of a jsonplaceholder todo."""
    return FetchFieldResolver("nextAction1", PLACEHOLDER_ITEM_URL, ("title",))


class ChainResolver(FetchFieldResolver):
    """
    Fetch a user and echo its name back as ``{"echoed": name}``.

    Sequence:
        None -> Request(url), continuation 1
        1    -> Response({"echoed": <name>})
    """

    def __init__(self, url: str = USER_URL):
        super().__init__("chain", url, ("name",))

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> ActionDescriptor:
        if previous is None:
            return RequestAction(url=self.url, name=self._name, continuation=1)

        return ResponseAction(body={"echoed": _field(previous, "name")})


class CountdownResolver(ActionResolver):
    """
    Three Response hops; only the last is returned.

    Intermediate hops answer "Test Failed" with a 500 so a broken chain
    that stops early is visible to the caller.

    Sequence:
        None -> Response("Test Failed", 500), continuation 1
        1    -> Response("Test Failed", 500), continuation 2
        2    -> Response("Test Passed", 200)
    """

    @property
    def name(self) -> str:
        return "next2"

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> ResponseAction:
        failed = ResponseAction(
            headers={"Content-Type": "text/plain"},
            body="Test Failed",
            status_code=500,
        )

        if previous is None:
            return failed.then(1)
        if previous.continuation == 1:
            return failed.then(2)
        if previous.continuation == 2:
            return ResponseAction(
                headers={"Content-Type": "text/plain"},
                body="Test Passed",
            )

        logger.warning(f"|next2| unexpected continuation: {previous.continuation}")
        return failed
