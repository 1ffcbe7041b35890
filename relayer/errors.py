"""
Fault taxonomy for Relayer.

Every failure inside the chain engine is raised as a Fault subclass that
carries the HTTP status code the boundary should answer with. Faults are
never swallowed inside the engine; they propagate to the request handler,
which converts them with error_response().

Taxonomy:
    ConfigurationFault  500/501  endpoint/descriptor/content-type defects
    NotFoundFault       404      path does not match the endpoint table
    MethodFault         400      endpoint matched, method not permitted
    InvalidBodyFault    400      request body had to be JSON and was not
    UpstreamFault       5xx      outbound request, secret or document failed
    AuthorizationFault  403      write action attempted without privilege
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .engine.records import ResponseRecord
    from .events import Event

logger = logging.getLogger(__name__)

SECRET_PLACEHOLDER = "SECRET"


# =============================================================================
# Exceptions
# =============================================================================


class Fault(Exception):
    """Base exception for all Relayer faults."""

    default_status = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status
        self.endpoint = endpoint

    def __str__(self) -> str:
        if self.endpoint:
            return f"[{self.endpoint}] {self.message}"
        return self.message


class ConfigurationFault(Fault):
    """
    A programming or configuration defect.

    Raised for unknown endpoints, unprocessable descriptors, unrecognized
    content types and runaway chains. Never expected in production.
    """


class NotFoundFault(Fault):
    """Raised when the event path matches no endpoint (404)."""

    default_status = 404


class MethodFault(Fault):
    """Raised when the endpoint exists but the HTTP method is not allowed."""

    default_status = 400


class InvalidBodyFault(Fault):
    """Raised when a body that must be JSON cannot be parsed."""

    default_status = 400


class UpstreamFault(Fault):
    """Raised when an outbound request, secret or document retrieval fails."""


class AuthorizationFault(Fault):
    """Raised when a write action is attempted without privilege (403)."""

    default_status = 403


# =============================================================================
# Scrubbing and error responses
# =============================================================================


def scrub_secrets(secret: Mapping[str, Any] | None, message: str) -> str:
    """
    Replace every string value of the held secret found in message.

    Example:
        >>> scrub_secrets({"password": "abc123"}, "failed: abc123 invalid")
        'failed: SECRET invalid'
    """
    if not secret:
        return message

    scrubbed = message
    for value in secret.values():
        if isinstance(value, str) and value:
            scrubbed = scrubbed.replace(value, SECRET_PLACEHOLDER)
    return scrubbed


def error_response(
    exc: BaseException,
    event: Event | None = None,
    secret: Mapping[str, Any] | None = None,
) -> ResponseRecord:
    """
    Convert any exception into a normalized error ResponseRecord.

    The status code comes from the fault (500 for anything else), the
    message is scrubbed of held secret values, and 500s are logged with the
    full inbound event for postmortem.
    """
    from .engine.records import ResponseRecord

    status_code = exc.status_code if isinstance(exc, Fault) else 500
    raw_message = exc.message if isinstance(exc, Fault) else str(exc)
    message = scrub_secrets(secret, raw_message)

    if status_code == 500:
        logger.error(f"error: {type(exc).__name__}: {message}")
        event_dump = json.dumps(event.to_dict(), default=str) if event is not None else "null"
        logger.error(f"event data: {scrub_secrets(secret, event_dump)}")

    return ResponseRecord(
        headers={"Content-Type": "text/json"},
        body=json.dumps({"code": status_code, "message": message}, separators=(",", ":")),
        status_code=status_code,
    )
