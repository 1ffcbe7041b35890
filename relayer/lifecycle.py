"""
Lifecycle management for Relayer.

Process-wide state lives in an explicit SessionState object rather than in
module globals. The LifecycleManager decides, once per external call,
whether the environment and the API secret must be (re)loaded.

Refresh policy (time-boxed):
    - A fresh process needs initialization.
    - After the first successful call the session is marked initialized.
    - Once ``refresh_seconds`` have passed since the last initialization,
      the next call re-initializes.

Concurrency:
    Calls sharing a session may race on refresh. Every refresh is a whole
    value swap under the session lock, so concurrent refreshes converge on
    the last fetched value and readers only ever see a complete secret.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .config import load_environment_file

if TYPE_CHECKING:
    from .actions.resolver import ApiDefinition
    from .integrations.secrets import SecretStore
    from .observability import ChainLogger

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 1800.0  # 30 minutes


def _freeze(value: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(value or {}))


@dataclass
class SessionState:
    """
    Process-wide state shared by all calls.

    ``secret`` is a read-only mapping; it is only ever replaced wholesale
    through LifecycleManager.replace_secret().
    """

    secret: Mapping[str, Any] = field(default_factory=lambda: _freeze(None))
    secret_id: str | None = None
    last_refresh: float | None = None
    needs_initialization: bool = True
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


class LifecycleManager:
    """
    Keeps the session's environment and secret fresh.

    Example:
        lifecycle = LifecycleManager(api, secret_store)
        session = SessionState()

        await lifecycle.prepare(session)      # before the chain runs
        ...
        lifecycle.mark_call_complete(session)  # after a successful call
    """

    def __init__(
        self,
        api: ApiDefinition,
        secrets: SecretStore,
        *,
        refresh_seconds: float = DEFAULT_REFRESH_SECONDS,
        environment_file: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.secrets = secrets
        self.refresh_seconds = refresh_seconds
        self.environment_file = environment_file
        self._clock = clock

    async def prepare(self, session: SessionState, log: ChainLogger | None = None) -> bool:
        """
        Initialize the session if it needs it.

        Loads the environment file (when configured) and, if the API holds a
        secret, fetches it. A failed fetch keeps the previous secret.

        Returns:
            True if initialization ran
        """
        if not session.needs_initialization:
            return False

        if self.environment_file and load_environment_file(self.environment_file):
            logger.debug(f"loaded environment from {self.environment_file}")

        if self.api.has_secret:
            await self.refresh_secret(session, log)

        return True

    async def refresh_secret(self, session: SessionState, log: ChainLogger | None = None) -> bool:
        """Fetch the API secret and swap it into the session."""
        secret_id = self.api.secret_id()
        value = await self.secrets.get(secret_id)
        if not value:
            logger.warning(f"|{secret_id}| secret not refreshed, keeping previous value")
            if log is not None:
                log.secret_refreshed(secret_id, success=False, reason="store returned nothing")
            return False

        await self.replace_secret(session, value, secret_id=secret_id)
        logger.info(f"|{secret_id}| secret refreshed")
        if log is not None:
            log.secret_refreshed(secret_id, success=True, reason="initialization")
        return True

    async def replace_secret(
        self,
        session: SessionState,
        value: Mapping[str, Any],
        *,
        secret_id: str | None = None,
    ) -> None:
        """Replace the held secret with a new value as a single swap."""
        frozen = _freeze(value)
        async with session.lock:
            session.secret = frozen
            if secret_id is not None:
                session.secret_id = secret_id

    def owns_secret(self, session: SessionState, secret_id: str) -> bool:
        """True if secret_id names the secret this session holds."""
        held = session.secret_id or (self.api.secret_id() if self.api.has_secret else None)
        return held == secret_id

    def mark_call_complete(self, session: SessionState) -> str:
        """
        Update the time-box after a successful call.

        Returns a short description of the decision, for debug logging.
        """
        now = self._clock()

        if session.needs_initialization:
            session.last_refresh = now
            session.needs_initialization = False
            logger.debug("initialization set to false")
            return "initialization set to false"

        elapsed = now - (session.last_refresh or now)
        if elapsed > self.refresh_seconds:
            session.needs_initialization = True
            logger.debug("initialization set to true")
            return "initialization set to true"

        logger.debug(f"initialization not set, elapsed: {elapsed:.0f}s")
        return f"initialization not set, elapsed: {elapsed:.0f}s expects: >{self.refresh_seconds:.0f}s"
