"""
Action Descriptors for Relayer.

A descriptor is the instruction a resolver hands to the executor for one
hop of a chain. It is a tagged union: every descriptor is exactly one of
RequestAction, ResponseAction, SecretAction or DocumentAction, and the
executor checks the four cases exhaustively.

Continuation encoding:
    ``continuation`` is None for a terminal descriptor. Any other value is a
    small positive integer naming the step of the resolver's own sequence
    that the next hop should perform; the engine folds it into the
    ChainState handed to the next resolve call untouched.

Example:
    # First hop of a two-step resolver
    RequestAction(url="https://example/1", continuation=1)

    # Final hop
    ResponseAction(body={"echoed": "x"})
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, TypeVar

DEFAULT_REQUEST_TIMEOUT = 7.0  # seconds

D = TypeVar("D", bound="ActionDescriptor")


class ActionKind(str, Enum):
    """Tag of an action descriptor."""

    REQUEST = "request"
    RESPONSE = "response"
    SECRET = "secret"
    DOCUMENT = "document"


class SecretMethod(str, Enum):
    """Secret store operation."""

    GET = "GET"
    POST = "POST"

    @classmethod
    def from_string(cls, value: str) -> SecretMethod:
        """Convert an HTTP-style method name, raising ValueError if unknown."""
        return cls(value.upper())


@dataclass(frozen=True, kw_only=True, slots=True)
class ActionDescriptor:
    """
    Base class for all descriptors.

    Subclasses set ``kind``; the base class only carries the optional
    continuation marker.
    """

    continuation: int | None = None

    @property
    def kind(self) -> ActionKind:
        raise NotImplementedError

    @property
    def is_terminal(self) -> bool:
        """True when no further hop is requested."""
        return self.continuation is None

    def then(self: D, continuation: int | None) -> D:
        """Return a copy carrying a different continuation marker."""
        return replace(self, continuation=continuation)

    def to_dict(self) -> dict[str, Any]:
        """Serialize descriptor for logging. Never includes secret values."""
        return {
            "kind": self.kind.value,
            "continuation": self.continuation,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(continuation={self.continuation})"


@dataclass(frozen=True, kw_only=True, slots=True)
class RequestAction(ActionDescriptor):
    """Outbound HTTP call specification."""

    url: str
    method: str = "GET"
    parameters: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    timeout: float = DEFAULT_REQUEST_TIMEOUT
    name: str = ""

    @property
    def kind(self) -> ActionKind:
        return ActionKind.REQUEST

    def to_dict(self) -> dict[str, Any]:
        base = ActionDescriptor.to_dict(self)
        base.update(
            {
                "name": self.name,
                "method": self.method,
                "url": self.url,
                "timeout": self.timeout,
            }
        )
        return base


@dataclass(frozen=True, kw_only=True, slots=True)
class ResponseAction(ActionDescriptor):
    """Literal response, returned once normalized."""

    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    status_code: int = 200

    @property
    def kind(self) -> ActionKind:
        return ActionKind.RESPONSE

    def to_dict(self) -> dict[str, Any]:
        base = ActionDescriptor.to_dict(self)
        base["status_code"] = self.status_code
        return base


@dataclass(frozen=True, kw_only=True, slots=True)
class SecretAction(ActionDescriptor):
    """
    Secret store operation.

    ``secret`` is only meaningful for POST and is the value to store.
    """

    method: SecretMethod = SecretMethod.GET
    secret_id: str
    secret: Any = None
    region: str | None = None

    @property
    def kind(self) -> ActionKind:
        return ActionKind.SECRET

    def to_dict(self) -> dict[str, Any]:
        base = ActionDescriptor.to_dict(self)
        base.update(
            {
                "method": self.method.value,
                "secret_id": self.secret_id,
                "region": self.region,
            }
        )
        return base


@dataclass(frozen=True, kw_only=True, slots=True)
class DocumentAction(ActionDescriptor):
    """Static document retrieval, e.g. ``documents/document.json``."""

    path: str

    @property
    def kind(self) -> ActionKind:
        return ActionKind.DOCUMENT

    def to_dict(self) -> dict[str, Any]:
        base = ActionDescriptor.to_dict(self)
        base["path"] = self.path
        return base
