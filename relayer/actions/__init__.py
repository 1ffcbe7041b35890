"""
Relayer Actions.

Descriptors describe one hop of a chain; resolvers produce them.

Usage:
    from relayer.actions import ApiDefinition, ResponseAction

    api = ApiDefinition(api_name="shop", api_version="v1")
    api.register_function(
        "ping",
        lambda event, secret, previous: ResponseAction(body={"pong": True}),
    )

Built-in resolvers live in ``relayer.actions.builtin`` and are imported
from there directly.
"""

from .descriptors import (
    DEFAULT_REQUEST_TIMEOUT,
    ActionDescriptor,
    ActionKind,
    DocumentAction,
    RequestAction,
    ResponseAction,
    SecretAction,
    SecretMethod,
)
from .resolver import (
    ActionResolver,
    ApiDefinition,
    Endpoint,
    FunctionResolver,
    ResolveFunction,
    Secret,
)

__all__ = [
    # Descriptors
    "ActionDescriptor",
    "ActionKind",
    "RequestAction",
    "ResponseAction",
    "SecretAction",
    "SecretMethod",
    "DocumentAction",
    "DEFAULT_REQUEST_TIMEOUT",
    # Resolvers
    "ActionResolver",
    "FunctionResolver",
    "ResolveFunction",
    "ApiDefinition",
    "Endpoint",
    "Secret",
]
