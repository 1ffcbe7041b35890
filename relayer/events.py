"""
Inbound events for Relayer.

An Event is the normalized, immutable form of one external call. The HTTP
listener (or the Lambda runtime) builds it once and it is discarded after
the call completes.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

from .errors import InvalidBodyFault


@dataclass(frozen=True, kw_only=True, slots=True)
class Event:
    """
    Inbound call: path, method, query parameters, body and headers.

    The body is whatever the listener could make of the payload: a parsed
    JSON value, a string, raw bytes, or None.
    """

    path: str | None = None
    http_method: str = "GET"
    query_parameters: dict[str, str] = field(default_factory=dict)
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Event:
        """
        Build an Event from a Lambda / API Gateway shaped dictionary.

        Accepts both ``queryStringParameters`` and ``queryParameters``.
        String bodies holding JSON are decoded.
        """
        query = data.get("queryStringParameters")
        if query is None:
            query = data.get("queryParameters")

        body = data.get("body")
        if isinstance(body, str):
            try:
                body = json.loads(body)
            except ValueError:
                pass

        return cls(
            path=data.get("path"),
            http_method=(data.get("httpMethod") or "GET").upper(),
            query_parameters=dict(query or {}),
            body=body,
            headers=dict(data.get("headers") or {}),
        )

    def query(self, name: str, default: str | None = None) -> str | None:
        """Get a single query parameter."""
        return self.query_parameters.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the event for logging."""
        body = self.body
        if isinstance(body, bytes):
            body = f"<{len(body)} bytes>"
        return {
            "path": self.path,
            "httpMethod": self.http_method,
            "queryStringParameters": self.query_parameters,
            "body": body,
            "headers": self.headers,
        }


# =============================================================================
# Payload helpers
# =============================================================================


def parse_query_string(query_string: str | None) -> dict[str, str]:
    """
    Parse a raw query string into a dictionary.

    A leading '?' is ignored, '+' decodes to a space and values are
    percent-decoded. Later duplicates win.
    """
    if not query_string:
        return {}

    if query_string.startswith("?"):
        query_string = query_string[1:]

    parameters: dict[str, str] = {}
    for part in query_string.split("&"):
        if not part:
            continue
        key, _, value = part.partition("=")
        parameters[key] = unquote(value).replace("+", " ")
    return parameters


def convert_body_data(chunks: bytes | Iterable[bytes] | None) -> Any:
    """
    Turn raw body bytes into JSON, a string, or leave them as bytes.

    Returns None for an empty body.
    """
    if chunks is None:
        return None

    data = chunks if isinstance(chunks, bytes) else b"".join(chunks)
    if not data:
        return None

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return data

    try:
        return json.loads(text)
    except ValueError:
        return text


def convert_to_json(value: Any) -> Any:
    """
    Coerce a body into a JSON structure.

    None becomes an empty dict and strings are parsed; anything else is
    returned unchanged.

    Raises:
        InvalidBodyFault: If a string body is not valid JSON
    """
    if value is None:
        return {}

    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError as e:
            raise InvalidBodyFault("delivered JSON is not parsable") from e

    return value
