"""
Single-hop resolvers returning a fixed body in each return type.

These double as smoke tests for a deployment: each one exercises a
different branch of the normalizer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from ..descriptors import ResponseAction
from ..resolver import ActionResolver, Secret

if TYPE_CHECKING:
    from ...engine.records import ChainState
    from ...events import Event


class TextResolver(ActionResolver):
    @property
    def name(self) -> str:
        return "text"

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> ResponseAction:
        return ResponseAction(
            headers={"Content-Type": "text/plain"},
            body="Hello World",
        )


class JsonResolver(ActionResolver):
    @property
    def name(self) -> str:
        return "json"

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> ResponseAction:
        return ResponseAction(
            headers={"Content-Type": "application/json"},
            body={"message": "Hello World"},
        )


class HtmlResolver(ActionResolver):
    @property
    def name(self) -> str:
        return "html"

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> ResponseAction:
        return ResponseAction(
            headers={"Content-Type": "text/html"},
            body="<html><body><h1>Hello World</h1></body></html>",
        )


class XmlResolver(ActionResolver):
    @property
    def name(self) -> str:
        return "xml"

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> ResponseAction:
        return ResponseAction(
            headers={"Content-Type": "application/xml"},
            body='<?xml version="1.0" encoding="UTF-8"?><message>Hello World</message>',
        )


class EchoResolver(ActionResolver):
    """
    Returns the ``message`` query parameter as plain text.

    Falls back to the request body (compact JSON when it was decoded into
    a structured value), then to "hello".
    """

    @property
    def name(self) -> str:
        return "echo"

    def resolve(self, event: Event, secret: Secret, previous: ChainState | None) -> ResponseAction:
        message = event.query("message")
        if message is None:
            body = event.body
            if body is None or body == "":
                message = "hello"
            elif isinstance(body, str):
                message = body
            elif isinstance(body, bytes):
                message = body.decode("utf-8", errors="replace")
            else:
                message = json.dumps(body, separators=(",", ":"))

        return ResponseAction(
            headers={"Content-Type": "text/plain"},
            body=message,
        )
