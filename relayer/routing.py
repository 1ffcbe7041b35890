"""
Endpoint routing for Relayer.

Maps an event path onto an endpoint name from the API's endpoint table.
Paths look like ``/{api_name}/{api_version}/{endpoint}``. Some gateways
strip the API name from the path, so it is added back when missing.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .errors import MethodFault, NotFoundFault

if TYPE_CHECKING:
    from .actions.resolver import ApiDefinition, Endpoint
    from .events import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutingDecision:
    """Records which endpoint a path resolved to, for observability."""

    path: str
    http_method: str
    endpoint: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "path": self.path,
            "http_method": self.http_method,
            "endpoint": self.endpoint,
        }


class EndpointRouter:
    """
    Prefix-match router over an ordered endpoint table.

    Example:
        router = EndpointRouter.for_api(api)
        name = router.resolve_endpoint_name(event)  # "next1"
    """

    def __init__(self, base_path: str | None, endpoints: Sequence[Endpoint]):
        self.base_path = (base_path or "").strip("/")
        self.endpoints = list(endpoints)

    @classmethod
    def for_api(cls, api: ApiDefinition) -> EndpointRouter:
        return cls(api.base_path(), api.endpoints)

    def _not_found(self, path: str | None) -> NotFoundFault:
        return NotFoundFault(f"path not found eventpath: |{path}| basePath: |/{self.base_path}/|")

    def resolve_endpoint_name(self, event: Event) -> str:
        """Return the endpoint name serving the event."""
        return self.route(event).endpoint

    def route(self, event: Event) -> RoutingDecision:
        """
        Resolve the event to a routing decision.

        Raises:
            NotFoundFault: No endpoint matches the path (404)
            MethodFault: The endpoint does not allow the method (400)
        """
        if event.path is None:
            raise self._not_found(event.path)

        path = event.path
        api_name = self.base_path.split("/")[0]
        if api_name and api_name not in path:
            path = f"/{api_name}{path}"
        path = path.rstrip("/") or "/"

        for endpoint in self.endpoints:
            if path != f"/{self.base_path}/{endpoint.name}":
                continue

            if not endpoint.allows(event.http_method):
                raise MethodFault(
                    f"|{event.http_method}| method not available for |{endpoint.name}|",
                    endpoint=endpoint.name,
                )

            logger.debug(f"Routing decision: {event.http_method} {path} -> {endpoint.name}")
            return RoutingDecision(
                path=path,
                http_method=event.http_method,
                endpoint=endpoint.name,
            )

        raise self._not_found(event.path)
