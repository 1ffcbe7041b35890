"""
Response Normalizer for Relayer.

Converts any raw outcome (HTTP fetch result, stored secret, retrieved
document or literal response) into a canonical ResponseRecord.

Content type inference uses a fixed mapping:

    application/json, text/json  -> json
    application/xml, text/xml    -> xml
    text/plain                   -> text
    text/html                    -> html
    anything else / missing      -> json

and the Content-Type header is rewritten to the canonical value of the
inferred type (text/json, text/xml, text/plain, text/html).

Structured bodies are serialized here and nowhere earlier, so that
intermediate hops see them as structured values.
"""

from __future__ import annotations

import base64
import json
import logging
from enum import Enum
from typing import Any

from ..errors import ConfigurationFault
from .records import RawOutcome, ResponseRecord

logger = logging.getLogger(__name__)

DEFAULT_BINARY_CONTENT_TYPE = "application/octet-stream"


class ReturnType(str, Enum):
    """Document type inferred from a content type."""

    TEXT = "text"
    JSON = "json"
    HTML = "html"
    XML = "xml"


_RETURN_TYPES: dict[str, ReturnType] = {
    "application/json": ReturnType.JSON,
    "text/json": ReturnType.JSON,
    "application/xml": ReturnType.XML,
    "text/xml": ReturnType.XML,
    "text/plain": ReturnType.TEXT,
    "text/html": ReturnType.HTML,
}

_CANONICAL_CONTENT_TYPES: dict[ReturnType, str] = {
    ReturnType.TEXT: "text/plain",
    ReturnType.JSON: "text/json",
    ReturnType.HTML: "text/html",
    ReturnType.XML: "text/xml",
}


def return_type_for_content_type(content_type: str | None) -> ReturnType:
    """Infer the return type of a media type; unknown or missing is json."""
    if not content_type:
        return ReturnType.JSON
    media_type = content_type.split(";")[0].strip().lower()
    return _RETURN_TYPES.get(media_type, ReturnType.JSON)


def content_type_for_return_type(return_type: ReturnType | str) -> str:
    """
    Canonical Content-Type header value for a return type.

    Raises:
        ConfigurationFault: If the return type is not one of the four known
    """
    try:
        return _CANONICAL_CONTENT_TYPES[ReturnType(return_type)]
    except ValueError as e:
        raise ConfigurationFault(f"returnType |{return_type}| not recognized") from e


def update_content_type_header(
    headers: dict[str, str],
    content_type: str,
) -> dict[str, str]:
    """Return a copy of headers with Content-Type replaced (any casing)."""
    updated = {k: v for k, v in headers.items() if k.lower() != "content-type"}
    updated["Content-Type"] = content_type
    return updated


def serialize_body(body: Any) -> str:
    """Serialize a structured body to compact JSON."""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def _is_structured(body: Any) -> bool:
    return isinstance(body, dict | list | tuple | int | float | bool)


def normalize(outcome: RawOutcome | ResponseRecord) -> ResponseRecord:
    """
    Normalize an outcome into a wire-ready ResponseRecord.

    Normalizing an already normalized record returns an equal record.
    """
    if isinstance(outcome, ResponseRecord):
        if outcome.is_base64_encoded:
            return outcome
        outcome = RawOutcome(
            headers=dict(outcome.headers),
            body=outcome.body,
            status_code=outcome.status_code,
        )

    status_code = outcome.status_code if outcome.status_code is not None else 200
    declared = outcome.content_type or outcome.header("Content-Type")
    body = outcome.body

    if isinstance(body, bytes | bytearray) and not outcome.binary:
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Undecodable body, treating as binary")
            return _binary_record(outcome.headers, bytes(body), declared, status_code)

    if outcome.binary:
        return _binary_record(outcome.headers, body, declared, status_code)

    if _is_structured(body):
        return_type = ReturnType.JSON
        wire_body = serialize_body(body)
    else:
        return_type = return_type_for_content_type(declared)
        wire_body = "" if body is None else str(body)

    headers = update_content_type_header(
        outcome.headers,
        content_type_for_return_type(return_type),
    )

    return ResponseRecord(
        headers=headers,
        body=wire_body,
        status_code=status_code,
    )


def _binary_record(
    headers: dict[str, str],
    body: Any,
    declared: str | None,
    status_code: int,
) -> ResponseRecord:
    """Base64 encode a binary payload, keeping its declared media type."""
    if isinstance(body, str):
        # Already base64 text
        encoded = body
    else:
        encoded = base64.b64encode(bytes(body or b"")).decode("ascii")

    return ResponseRecord(
        headers=update_content_type_header(headers, declared or DEFAULT_BINARY_CONTENT_TYPE),
        body=encoded,
        status_code=status_code,
        is_base64_encoded=True,
    )
