"""
Dependency Injection for Relayer.

Provides the process-wide RequestHandler. One handler means one
SessionState, so the held secret and its time-box are shared by every
request this process serves.
"""

from __future__ import annotations

import logging
from typing import Optional

from relayer.config import get_settings
from relayer.handler import RequestHandler, create_request_handler

logger = logging.getLogger(__name__)

# Global instance (initialized on first access)
_handler: Optional[RequestHandler] = None


def get_request_handler() -> RequestHandler:
    """
    Get the request handler.

    Builds it from settings on first call.
    """
    global _handler
    if _handler is None:
        _handler = create_request_handler(get_settings())
    return _handler


def set_request_handler(handler: Optional[RequestHandler]) -> None:
    """Replace the process-wide handler. Used by tests."""
    global _handler
    _handler = handler


async def initialize_services() -> None:
    """
    Initialize services on application startup.

    Called from FastAPI lifespan.
    """
    get_request_handler()


async def shutdown_services() -> None:
    """
    Cleanup services on application shutdown.

    Called from FastAPI lifespan.
    """
    global _handler
    if _handler is not None:
        await _handler.close()
        _handler = None
