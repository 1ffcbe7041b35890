"""
Response records for the chain engine.

RawOutcome      what the executor produced for one hop (body still structured)
ResponseRecord  canonical, wire-ready response {headers, body, statusCode}
ChainState      previous-hop value handed to the next resolve call
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, kw_only=True, slots=True)
class RawOutcome:
    """
    Result of executing one descriptor, before normalization.

    Attributes:
        headers: Headers from the upstream or the literal response
        body: Structured value, string or bytes
        status_code: HTTP status of the outcome
        content_type: Declared media type used for inference (falls back
            to the Content-Type header when None)
        binary: Body is binary and must be base64 encoded
    """

    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    status_code: int | None = 200
    content_type: str | None = None
    binary: bool = False

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True, kw_only=True, slots=True)
class ResponseRecord:
    """
    Canonical response returned to the caller.

    ``body`` is always wire-ready (a string); binary payloads are base64
    text with ``is_base64_encoded`` set.
    """

    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    status_code: int = 200
    is_base64_encoded: bool = False

    @property
    def content_type(self) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return None

    def to_boundary(self) -> dict[str, Any]:
        """Serialize to the Lambda-style boundary shape."""
        result: dict[str, Any] = {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
        }
        if self.is_base64_encoded:
            result["isBase64Encoded"] = True
        return result


@dataclass(frozen=True, kw_only=True, slots=True)
class ChainState:
    """
    Previous-hop value passed into the next resolve call.

    Carries the hop's normalized headers and status code, the body as the
    structured value it had before serialization (so resolvers can inspect
    it), and the continuation marker of the descriptor that produced it.
    """

    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    status_code: int = 200
    continuation: int | None = None
    record: ResponseRecord | None = None

    @classmethod
    def from_hop(
        cls,
        record: ResponseRecord,
        outcome: RawOutcome,
        continuation: int | None,
    ) -> ChainState:
        """Fold a hop's normalized record and continuation into chain state."""
        return cls(
            headers=dict(record.headers),
            body=outcome.body,
            status_code=record.status_code,
            continuation=continuation,
            record=record,
        )

    def json(self) -> Any:
        """Body as a JSON structure, parsing string bodies."""
        if isinstance(self.body, str):
            return json.loads(self.body)
        return self.body
