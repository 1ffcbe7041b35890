"""
Secret resolvers.

``secret`` reads (GET) or writes (POST) a named secret in the store; the
``region`` query parameter picks the store region. ``secretFromMemory``
answers from the secret the session already holds, without a store call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..descriptors import ActionDescriptor, ResponseAction, SecretAction, SecretMethod
from ..resolver import ActionResolver, Secret

if TYPE_CHECKING:
    from ...engine.records import ChainState
    from ...events import Event

DEFAULT_SECRET_ID = "common/QA"


class SecretResolver(ActionResolver):
    """
    Single Secret hop.

    GET returns the stored secret; POST stores the request body and returns
    the store's acknowledgement.
    """

    def __init__(self, secret_id: str = DEFAULT_SECRET_ID):
        self.secret_id = secret_id

    @property
    def name(self) -> str:
        return "secret"

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> SecretAction:
        method = SecretMethod.from_string(event.http_method)
        return SecretAction(
            method=method,
            secret_id=self.secret_id,
            secret=event.body if method is SecretMethod.POST else None,
            region=event.query("region"),
        )


class SecretFromMemoryResolver(ActionResolver):
    """
    Reports which keys the held secret has.

    Values are never echoed back.
    """

    @property
    def name(self) -> str:
        return "secretFromMemory"

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> ActionDescriptor:
        return ResponseAction(
            headers={"Content-Type": "text/json"},
            body={"loaded": bool(secret), "keys": sorted(secret)},
        )
