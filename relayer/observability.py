"""
Observability for Relayer.

Structured JSON logging for chain execution. Each record carries the
execution id of the call it belongs to, so all hops of one chain can be
correlated in the log stream.

Secret values are never handed to these loggers; descriptors are logged
through their to_dict(), which omits them.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol


class LogLevel(Enum):
    """Standard log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class StructuredLogger(Protocol):
    """Protocol for loggers that emit key-value records."""

    def debug(self, message: str, **context: Any) -> None:
        ...

    def info(self, message: str, **context: Any) -> None:
        ...

    def warning(self, message: str, **context: Any) -> None:
        ...

    def error(self, message: str, **context: Any) -> None:
        ...


@dataclass
class JSONLogger:
    """
    Structured logger that outputs JSON-formatted logs.

    Example output:
        {"timestamp": "2026-01-02T10:30:00+00:00", "level": "info",
         "message": "Chain started", "request_id": "abc-123",
         "endpoint": "next1"}
    """

    name: str = "relayer"
    request_id: str | None = None
    extra_context: dict[str, Any] = field(default_factory=dict)
    _python_logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._python_logger = logging.getLogger(self.name)

    def _log(self, level: LogLevel, message: str, context: dict[str, Any]) -> None:
        if not self._python_logger.isEnabledFor(getattr(logging, level.name)):
            return

        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.value,
            "message": message,
            **self.extra_context,
            **context,
        }
        if self.request_id:
            record["request_id"] = self.request_id

        getattr(self._python_logger, level.value)(json.dumps(record, default=str))

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._log(LogLevel.ERROR, message, context)

    def with_context(self, **extra: Any) -> JSONLogger:
        """Create a new logger with additional context."""
        return JSONLogger(
            name=self.name,
            request_id=self.request_id,
            extra_context={**self.extra_context, **extra},
        )


@dataclass
class ChainLogger:
    """
    Specialized logger for chain execution events.

    Example:
        log = ChainLogger(request_id="abc-123", endpoint="next1")
        log.chain_started(method="GET", path="/relayer/v1/next1")
        log.hop_started(hop=1, descriptor={"kind": "request", ...})
        log.hop_completed(hop=1, status_code=200, duration_ms=120.0, continuation=1)
        log.chain_completed(hops=2, status_code=200, duration_ms=250.0)
    """

    request_id: str
    endpoint: str = ""
    inner: StructuredLogger | None = None

    def __post_init__(self) -> None:
        if self.inner is None:
            self.inner = JSONLogger(
                name="relayer.chain",
                request_id=self.request_id,
                extra_context={"endpoint": self.endpoint} if self.endpoint else {},
            )

    def endpoint_resolved(self, method: str, path: str | None, endpoint: str) -> None:
        self.inner.debug("Endpoint resolved", method=method, path=path, endpoint=endpoint)

    def chain_started(self, method: str, path: str | None) -> None:
        self.inner.info("Chain started", method=method, path=path)

    def hop_started(self, hop: int, descriptor: dict[str, Any]) -> None:
        self.inner.debug("Hop started", hop=hop, descriptor=descriptor)

    def hop_completed(
        self,
        hop: int,
        status_code: int,
        duration_ms: float,
        continuation: int | None,
    ) -> None:
        self.inner.debug(
            "Hop completed",
            hop=hop,
            status_code=status_code,
            duration_ms=round(duration_ms, 2),
            continuation=continuation,
        )

    def chain_completed(self, hops: int, status_code: int, duration_ms: float) -> None:
        self.inner.info(
            "Chain completed",
            hops=hops,
            status_code=status_code,
            duration_ms=round(duration_ms, 2),
        )

    def chain_failed(self, hops: int, error: str, error_type: str, duration_ms: float) -> None:
        self.inner.error(
            "Chain failed",
            hops=hops,
            error=error,
            error_type=error_type,
            duration_ms=round(duration_ms, 2),
        )

    def secret_refreshed(self, secret_id: str, success: bool, reason: str) -> None:
        level_method = self.inner.info if success else self.inner.warning
        level_method("Secret refreshed", secret_id=secret_id, success=success, reason=reason)
