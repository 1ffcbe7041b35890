"""
Chain Context for Relayer.

Request-scoped bookkeeping for one chain run: execution id, hop log and
per-hop timings. Created at the start of a call and discarded after it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class HopRecord:
    """Audit entry for one hop."""

    hop: int
    descriptor: dict[str, Any]
    status_code: int | None = None
    duration_ms: float = 0.0
    continuation: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "hop": self.hop,
            "descriptor": self.descriptor,
            "status_code": self.status_code,
            "duration_ms": round(self.duration_ms, 2),
            "continuation": self.continuation,
        }


@dataclass
class ChainContext:
    """
    Request-scoped context passed through one chain run.

    Provides:
    - Unique execution ID for log correlation
    - Endpoint and method being served
    - Audit trail of hops with timings
    """

    execution_id: UUID = field(default_factory=uuid4)
    started_at: datetime = field(default_factory=_utc_now)
    endpoint: str = ""
    http_method: str = ""
    hops: list[HopRecord] = field(default_factory=list)

    @property
    def elapsed_ms(self) -> float:
        """Milliseconds since the chain started."""
        delta = datetime.now(timezone.utc) - self.started_at
        return delta.total_seconds() * 1000

    @property
    def hop_count(self) -> int:
        return len(self.hops)

    def start_hop(self, descriptor: dict[str, Any]) -> HopRecord:
        """Append a new hop record and return it."""
        record = HopRecord(hop=len(self.hops) + 1, descriptor=descriptor)
        self.hops.append(record)
        return record

    def to_audit_dict(self) -> dict[str, Any]:
        """Generate audit record for logging."""
        return {
            "execution_id": str(self.execution_id),
            "started_at": self.started_at.isoformat(),
            "completed_at": datetime.now(timezone.utc).isoformat(),
            "duration_ms": self.elapsed_ms,
            "endpoint": self.endpoint,
            "http_method": self.http_method,
            "hop_count": self.hop_count,
            "hops": [h.to_dict() for h in self.hops],
        }
