"""
Request handler for Relayer.

The boundary between the outside world and the chain engine. One call:

    1. Optionally replace the event with a debug override (only while the
       session still needs initialization)
    2. Let the lifecycle manager initialize the session if due
    3. Route the event to an endpoint
    4. Run the endpoint's chain
    5. Update the initialization time-box
    6. Return the boundary dict

Every fault raised along the way is converted into a JSON error response
with the held secret scrubbed from its message. The caller never sees an
exception.

Usage (AWS Lambda):
    handler = relayer.handler.lambda_handler

Usage (embedded):
    handler = create_request_handler(get_settings())
    response = await handler.handle({"path": "/relayer/v1/text", "httpMethod": "GET"})
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .actions.builtin import create_default_api
from .actions.resolver import ApiDefinition
from .config import AppSettings, get_settings
from .engine.chain import ChainEngine
from .engine.context import ChainContext
from .engine.executor import ActionExecutor
from .errors import ConfigurationFault, error_response
from .events import Event
from .integrations.documents import DocumentStore, FileDocumentStore
from .integrations.http import OutboundRequestRunner
from .integrations.secrets import SecretStore, create_secret_store
from .lifecycle import LifecycleManager, SessionState
from .observability import ChainLogger
from .routing import EndpointRouter

logger = logging.getLogger(__name__)


class RequestHandler:
    """
    Runs one external call end to end and returns the boundary dict.

    The handler owns the process-wide SessionState; build one handler per
    process and reuse it across calls.
    """

    def __init__(
        self,
        *,
        api: ApiDefinition,
        engine: ChainEngine,
        lifecycle: LifecycleManager,
        session: SessionState | None = None,
        router: EndpointRouter | None = None,
        runner: OutboundRequestRunner | None = None,
        event_override_file: str | None = None,
    ):
        self.api = api
        self.engine = engine
        self.lifecycle = lifecycle
        self.session = session or SessionState()
        self.router = router or EndpointRouter.for_api(api)
        self.runner = runner
        self.event_override_file = event_override_file

    def _load_event_override(self) -> Event | None:
        if not self.event_override_file or not self.session.needs_initialization:
            return None

        path = Path(self.event_override_file)
        if not path.is_file():
            return None

        logger.warning(f"loading event override from {path}")
        return Event.from_mapping(json.loads(path.read_text()))

    async def handle(self, event: Event | Mapping[str, Any]) -> dict[str, Any]:
        """
        Handle one external call.

        Args:
            event: An Event, or a Lambda / API Gateway shaped dict

        Returns:
            ``{"statusCode", "headers", "body"[, "isBase64Encoded"]}``
        """
        if not isinstance(event, Event):
            event = Event.from_mapping(event)

        processed = event
        response = error_response(
            ConfigurationFault("response not processed", status_code=501),
            event,
        )

        try:
            override = self._load_event_override()
            if override is not None:
                processed = override

            ctx = ChainContext()
            log = ChainLogger(request_id=str(ctx.execution_id))

            if await self.lifecycle.prepare(self.session, log):
                logger.debug("session initialized")

            endpoint = self.router.resolve_endpoint_name(processed)
            log.endpoint_resolved(
                method=processed.http_method,
                path=processed.path,
                endpoint=endpoint,
            )

            record = await self.engine.run(processed, self.session, endpoint, ctx)
            logger.debug(f"chain audit: {ctx.to_audit_dict()}")

            decision = self.lifecycle.mark_call_complete(self.session)
            logger.debug(decision)

            response = record
        except Exception as e:
            response = error_response(e, processed, self.session.secret)

        return response.to_boundary()

    async def close(self) -> None:
        """Release the outbound HTTP client."""
        if self.runner is not None:
            await self.runner.close()


def create_request_handler(
    settings: AppSettings | None = None,
    *,
    api: ApiDefinition | None = None,
    secrets: SecretStore | None = None,
    documents: DocumentStore | None = None,
    runner: OutboundRequestRunner | None = None,
) -> RequestHandler:
    """
    Wire a RequestHandler from settings.

    Any collaborator may be passed in to replace the one built from
    settings.
    """
    settings = settings or get_settings()
    api = api or create_default_api(settings)
    secrets = secrets or create_secret_store(settings)
    documents = documents or FileDocumentStore(settings.documents_root)
    runner = runner or OutboundRequestRunner(
        max_retries=settings.request_max_retries,
        retry_delay=settings.request_retry_delay,
        default_timeout=settings.request_timeout,
    )

    executor = ActionExecutor(
        runner=runner,
        secrets=secrets,
        documents=documents,
        allow_secret_write=settings.allow_secret_write,
    )
    lifecycle = LifecycleManager(
        api,
        secrets,
        refresh_seconds=settings.secret_refresh_seconds,
        environment_file=settings.environment_file,
    )
    engine = ChainEngine(api, executor, lifecycle, max_hops=settings.max_hops)

    logger.info(
        f"Request handler ready: base path /{api.base_path()}, "
        f"{len(api.endpoints)} endpoints, secret store {type(secrets).__name__}"
    )

    return RequestHandler(
        api=api,
        engine=engine,
        lifecycle=lifecycle,
        runner=runner,
        event_override_file=settings.event_override_file,
    )


# =============================================================================
# AWS Lambda entry point
# =============================================================================

_loop: asyncio.AbstractEventLoop | None = None
_handler: RequestHandler | None = None


def lambda_handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
    """
    AWS Lambda entry point.

    Warm invocations reuse the same event loop and handler, so the session
    secret and the HTTP connection pool survive between calls.
    """
    global _loop, _handler

    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_loop)

    if _handler is None:
        settings = get_settings()
        logging.basicConfig(
            level=logging.DEBUG if settings.debug else logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        _handler = create_request_handler(settings)

    return _loop.run_until_complete(_handler.handle(event))
