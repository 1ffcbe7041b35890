"""
Relayer - a serverless request router.

Relayer maps an inbound call onto a named endpoint and runs that
endpoint's action chain: outbound HTTP requests, secret store reads and
writes, static documents, and literal responses, each hop able to see the
result of the one before it. The final hop is normalized into an
API-Gateway style response.

Quick Start:
    >>> from relayer import create_request_handler, get_settings
    >>>
    >>> handler = create_request_handler(get_settings())
    >>> await handler.handle({"path": "/relayer/v1/text", "httpMethod": "GET"})
    {'statusCode': 200, 'headers': {'Content-Type': 'text/plain'}, 'body': 'Hello World'}

Custom endpoints:
    >>> from relayer import ApiDefinition, ResponseAction
    >>>
    >>> api = ApiDefinition(api_name="shop", api_version="v1")
    >>> api.register_function("ping", lambda event, secret, previous: ResponseAction(body="pong"))
    >>> handler = create_request_handler(api=api)
"""

__version__ = "0.1.0"

from relayer.actions import (
    ActionDescriptor,
    ActionResolver,
    ApiDefinition,
    DocumentAction,
    RequestAction,
    ResponseAction,
    SecretAction,
    SecretMethod,
)
from relayer.config import AppSettings, get_settings
from relayer.engine import ChainEngine, ChainState, ResponseRecord, normalize
from relayer.errors import Fault
from relayer.events import Event
from relayer.handler import RequestHandler, create_request_handler, lambda_handler

__all__ = [
    # Version info
    "__version__",
    # Descriptors and resolvers
    "ActionDescriptor",
    "RequestAction",
    "ResponseAction",
    "SecretAction",
    "SecretMethod",
    "DocumentAction",
    "ActionResolver",
    "ApiDefinition",
    # Engine
    "ChainEngine",
    "ChainState",
    "ResponseRecord",
    "normalize",
    # Boundary
    "Event",
    "Fault",
    "RequestHandler",
    "create_request_handler",
    "lambda_handler",
    # Config
    "AppSettings",
    "get_settings",
]
