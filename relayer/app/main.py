"""
Relayer - serverless request router

FastAPI application entry point. Every path other than /health is handed
to the request handler, exactly as a Lambda invocation would be.
"""

from __future__ import annotations

import base64
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request, Response

from relayer import __version__
from relayer.app.dependencies import get_request_handler, initialize_services, shutdown_services
from relayer.config import get_settings
from relayer.events import Event, convert_body_data
from relayer.handler import RequestHandler

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Recomputed by the server for the body actually sent
HOP_HEADERS = frozenset({"content-length", "content-encoding", "transfer-encoding", "connection"})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting Relayer...")
    try:
        await initialize_services()
        logger.info("Relayer initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("Shutting down Relayer...")
    try:
        await shutdown_services()
        logger.info("Relayer shut down successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}", exc_info=True)


app = FastAPI(
    title="Relayer",
    description="Serverless request router chaining outbound requests, secrets and documents",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    handler = get_request_handler()
    return {
        "status": "healthy",
        "base_path": f"/{handler.api.base_path()}",
        "endpoints": handler.api.endpoint_names,
        "initialized": not handler.session.needs_initialization,
    }


async def request_to_event(request: Request) -> Event:
    """Convert an inbound HTTP request into an Event."""
    return Event(
        path=request.url.path,
        http_method=request.method.upper(),
        query_parameters=dict(request.query_params),
        body=convert_body_data(await request.body()),
        headers=dict(request.headers),
    )


def boundary_to_response(result: dict[str, Any]) -> Response:
    """Convert a boundary dict into an HTTP response."""
    body: str | bytes = result.get("body") or ""
    if result.get("isBase64Encoded"):
        body = base64.b64decode(body)

    headers = {
        k: v for k, v in (result.get("headers") or {}).items() if k.lower() not in HOP_HEADERS
    }
    media_type = headers.pop("Content-Type", None)

    return Response(
        content=body,
        status_code=result.get("statusCode", 200),
        headers=headers,
        media_type=media_type,
    )


@app.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    tags=["relay"],
)
async def relay(
    request: Request,
    handler: RequestHandler = Depends(get_request_handler),
) -> Response:
    """Route the request through the chain engine."""
    event = await request_to_event(request)
    result = await handler.handle(event)
    return boundary_to_response(result)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "relayer.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
