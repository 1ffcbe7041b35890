"""
Action Resolver abstraction for Relayer.

Resolvers turn (event, secret, previous hop) into the descriptor for the
next hop. They are pure functions of their inputs: whatever state a
multi-hop resolver needs travels in the continuation marker of the
ChainState it receives.

An ApiDefinition groups the resolvers of one API together with its
endpoint table, base path and secret id, and dispatches by endpoint name.

Example:
    class Greeting(ActionResolver):
        @property
        def name(self) -> str:
            return "greeting"

        def resolve(self, event, secret, previous):
            return ResponseAction(
                headers={"Content-Type": "text/plain"},
                body="hello",
            )

    api = ApiDefinition(api_name="shop", api_version="v1")
    api.register(Greeting(), methods=["GET"])
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..errors import ConfigurationFault
from .descriptors import ActionDescriptor

if TYPE_CHECKING:
    from ..engine.records import ChainState
    from ..events import Event

logger = logging.getLogger(__name__)

Secret = Mapping[str, Any]
ResolveFunction = Callable[["Event", Secret, "ChainState | None"], ActionDescriptor]


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Endpoint table entry: logical name and permitted HTTP methods."""

    name: str
    methods: tuple[str, ...] = ("GET",)

    def allows(self, method: str) -> bool:
        return method.upper() in self.methods


class ActionResolver(ABC):
    """
    Base class for endpoint resolvers.

    On the first hop ``previous`` is None. A resolver that needs several
    hops returns a descriptor with a continuation marker and, on the next
    call, reads ``previous.continuation`` to pick its next step.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Endpoint name this resolver serves."""
        ...

    @abstractmethod
    def resolve(
        self,
        event: Event,
        secret: Secret,
        previous: ChainState | None,
    ) -> ActionDescriptor:
        """Return the descriptor for the next hop."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


class FunctionResolver(ActionResolver):
    """Adapts a plain function to the resolver interface."""

    def __init__(self, name: str, func: ResolveFunction):
        self._name = name
        self._func = func

    @property
    def name(self) -> str:
        return self._name

    def resolve(
        self,
        event: Event,
        secret: Secret,
        previous: ChainState | None,
    ) -> ActionDescriptor:
        return self._func(event, secret, previous)


class ApiDefinition:
    """
    One API: its endpoint table and the resolvers behind it.

    The endpoint table is ordered by registration. ``secret_id()`` names
    the secret the lifecycle manager keeps fresh when ``has_secret`` is set.
    """

    def __init__(
        self,
        *,
        api_name: str,
        api_version: str,
        environment: str = "development",
        has_secret: bool = False,
    ):
        self.api_name = api_name
        self.api_version = api_version
        self.environment = environment
        self.has_secret = has_secret
        self._endpoints: list[Endpoint] = []
        self._resolvers: dict[str, ActionResolver] = {}

    def secret_id(self) -> str:
        return f"{self.api_name}/{self.environment}"

    def base_path(self) -> str:
        return f"{self.api_name}/{self.api_version}"

    @property
    def endpoints(self) -> list[Endpoint]:
        return list(self._endpoints)

    @property
    def endpoint_names(self) -> list[str]:
        return [e.name for e in self._endpoints]

    def register(
        self,
        resolver: ActionResolver,
        methods: Iterable[str] = ("GET",),
    ) -> ApiDefinition:
        """
        Register a resolver and its endpoint.

        Re-registering a name replaces the resolver and its methods.
        """
        endpoint = Endpoint(resolver.name, tuple(m.upper() for m in methods))
        if resolver.name in self._resolvers:
            logger.warning(f"Replacing resolver for endpoint: {resolver.name}")
            self._endpoints = [e for e in self._endpoints if e.name != resolver.name]
        self._endpoints.append(endpoint)
        self._resolvers[resolver.name] = resolver
        return self

    def register_function(
        self,
        name: str,
        func: ResolveFunction,
        methods: Iterable[str] = ("GET",),
    ) -> ApiDefinition:
        """Register a plain function as the resolver of an endpoint."""
        return self.register(FunctionResolver(name, func), methods)

    def resolve(
        self,
        event: Event,
        secret: Secret,
        endpoint: str,
        previous: ChainState | None = None,
    ) -> ActionDescriptor:
        """
        Resolve the next descriptor for an endpoint.

        Raises:
            ConfigurationFault: If the endpoint is unknown or its resolver
                does not return a descriptor
        """
        resolver = self._resolvers.get(endpoint)
        if resolver is None:
            raise ConfigurationFault(f"|{endpoint}| endpoint unknown", endpoint=endpoint)

        descriptor = resolver.resolve(event, secret, previous)
        if not isinstance(descriptor, ActionDescriptor):
            raise ConfigurationFault(
                f"resolver for |{endpoint}| did not return an action descriptor",
                status_code=501,
                endpoint=endpoint,
            )
        return descriptor

    def __repr__(self) -> str:
        return f"ApiDefinition(base_path='{self.base_path()}', endpoints={self.endpoint_names})"
