"""
Chain Engine for Relayer.

Drives the resolve -> execute -> normalize loop for one external call:

    previous = None
    loop:
        descriptor = resolve(event, secret, endpoint, previous)
        outcome    = execute(descriptor)
        record     = normalize(outcome)
        if descriptor has a continuation:
            previous = record + structured body + continuation
            continue
        return record

Hops are strictly sequential; each one completes, including its I/O,
before the next resolve call. The loop is bounded by ``max_hops`` so a
resolver that never drops its continuation fails loudly instead of
spinning forever.

Faults raised inside the loop are not caught here; they propagate to the
request handler boundary.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from ..actions.descriptors import SecretAction, SecretMethod
from ..errors import ConfigurationFault, scrub_secrets
from ..integrations.secrets import coerce_secret
from ..observability import ChainLogger
from .context import ChainContext
from .executor import check_descriptor
from .normalizer import normalize
from .records import ChainState, ResponseRecord

if TYPE_CHECKING:
    from ..actions.descriptors import ActionDescriptor
    from ..actions.resolver import ApiDefinition
    from ..events import Event
    from ..lifecycle import LifecycleManager, SessionState
    from .executor import ActionExecutor

logger = logging.getLogger(__name__)

DEFAULT_MAX_HOPS = 10


class ChainEngine:
    """
    Runs an endpoint's action chain to its terminal response.

    Example:
        engine = ChainEngine(api, executor, lifecycle, max_hops=10)
        record = await engine.run(event, session, "next1")
    """

    def __init__(
        self,
        api: ApiDefinition,
        executor: ActionExecutor,
        lifecycle: LifecycleManager | None = None,
        *,
        max_hops: int = DEFAULT_MAX_HOPS,
    ):
        if max_hops < 1:
            raise ValueError("max_hops must be at least 1")
        self.api = api
        self.executor = executor
        self.lifecycle = lifecycle
        self.max_hops = max_hops

    async def run(
        self,
        event: Event,
        session: SessionState,
        endpoint: str,
        ctx: ChainContext | None = None,
    ) -> ResponseRecord:
        """
        Run the chain for an endpoint.

        Args:
            event: The inbound event
            session: Process-wide session holding the current secret
            endpoint: Endpoint name selected by the router
            ctx: Optional context collecting the hop audit trail

        Returns:
            The normalized response of the first terminal descriptor

        Raises:
            ConfigurationFault: If the chain exceeds max_hops, or from the
                resolver/executor/normalizer
            Fault: Any other fault raised by a hop
        """
        if ctx is None:
            ctx = ChainContext()
        ctx.endpoint = endpoint
        ctx.http_method = event.http_method

        log = ChainLogger(request_id=str(ctx.execution_id), endpoint=endpoint)
        log.chain_started(method=event.http_method, path=event.path)

        previous: ChainState | None = None

        try:
            while True:
                if ctx.hop_count >= self.max_hops:
                    raise ConfigurationFault(
                        f"|{endpoint}| exceeded {self.max_hops} hops",
                        endpoint=endpoint,
                    )

                descriptor = check_descriptor(
                    self.api.resolve(event, session.secret, endpoint, previous)
                )
                hop = ctx.start_hop(descriptor.to_dict())
                log.hop_started(hop=hop.hop, descriptor=hop.descriptor)
                logger.debug(
                    f"Processing |{endpoint}| method: |{event.http_method}| "
                    f"hop: {hop.hop} continuation: |{descriptor.continuation}|"
                )

                start_time = time.perf_counter()
                outcome = await self.executor.execute(descriptor)
                record = normalize(outcome)
                await self._after_hop(descriptor, session)

                hop.duration_ms = (time.perf_counter() - start_time) * 1000
                hop.status_code = record.status_code
                hop.continuation = descriptor.continuation
                log.hop_completed(
                    hop=hop.hop,
                    status_code=record.status_code,
                    duration_ms=hop.duration_ms,
                    continuation=descriptor.continuation,
                )

                if descriptor.is_terminal:
                    log.chain_completed(
                        hops=ctx.hop_count,
                        status_code=record.status_code,
                        duration_ms=ctx.elapsed_ms,
                    )
                    return record

                previous = ChainState.from_hop(record, outcome, descriptor.continuation)

        except Exception as e:
            log.chain_failed(
                hops=ctx.hop_count,
                error=scrub_secrets(session.secret, str(e)),
                error_type=type(e).__name__,
                duration_ms=ctx.elapsed_ms,
            )
            raise

    async def _after_hop(
        self,
        descriptor: ActionDescriptor,
        session: SessionState,
    ) -> None:
        """Swap in a secret this session holds after a successful write."""
        if self.lifecycle is None:
            return
        if not isinstance(descriptor, SecretAction) or descriptor.method is not SecretMethod.POST:
            return
        if not self.lifecycle.owns_secret(session, descriptor.secret_id):
            return

        value = coerce_secret(descriptor.secret)
        if value is not None:
            await self.lifecycle.replace_secret(session, value, secret_id=descriptor.secret_id)
            logger.info(f"|{descriptor.secret_id}| held secret replaced after store")

    def __repr__(self) -> str:
        return f"ChainEngine(api={self.api!r}, max_hops={self.max_hops})"
