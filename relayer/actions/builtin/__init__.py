"""
Built-in resolvers for the default Relayer API.

Usage:
    from relayer.actions.builtin import create_default_api

    api = create_default_api(get_settings())
    api.resolve(event, secret, "next1")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..resolver import ApiDefinition
from .chains import ChainResolver, CountdownResolver, FetchFieldResolver, next1, next_action1
from .documents import CachedDocumentResolver, document_jpg, document_json
from .formats import EchoResolver, HtmlResolver, JsonResolver, TextResolver, XmlResolver
from .secrets import DEFAULT_SECRET_ID, SecretFromMemoryResolver, SecretResolver

if TYPE_CHECKING:
    from ...config import AppSettings


def create_default_api(settings: AppSettings, *, has_secret: bool = False) -> ApiDefinition:
    """
    Assemble the built-in endpoint table.

    Endpoints are registered in routing order.
    """
    api = ApiDefinition(
        api_name=settings.api_name,
        api_version=settings.api_version,
        environment=settings.environment,
        has_secret=has_secret,
    )

    return (
        api.register(TextResolver())
        .register(JsonResolver())
        .register(HtmlResolver())
        .register(XmlResolver())
        .register(EchoResolver(), methods=["GET", "POST"])
        .register(ChainResolver())
        .register(next1())
        .register(CountdownResolver())
        .register(next_action1())
        .register(SecretResolver(), methods=["GET", "POST"])
        .register(SecretFromMemoryResolver())
        .register(document_json())
        .register(document_jpg())
    )


__all__ = [
    "create_default_api",
    "TextResolver",
    "JsonResolver",
    "HtmlResolver",
    "XmlResolver",
    "EchoResolver",
    "FetchFieldResolver",
    "ChainResolver",
    "CountdownResolver",
    "next1",
    "next_action1",
    "SecretResolver",
    "SecretFromMemoryResolver",
    "DEFAULT_SECRET_ID",
    "CachedDocumentResolver",
    "document_json",
    "document_jpg",
]
