"""
Relayer Chain Engine

Core Components:
- ActionExecutor: runs one descriptor against its collaborator
- normalize(): turns any outcome into a canonical ResponseRecord
- ChainEngine: the resolve -> execute -> normalize loop
- ChainContext: per-call hop audit trail
"""

from .chain import DEFAULT_MAX_HOPS, ChainEngine
from .context import ChainContext, HopRecord
from .executor import ActionExecutor
from .normalizer import (
    ReturnType,
    content_type_for_return_type,
    normalize,
    return_type_for_content_type,
)
from .records import ChainState, RawOutcome, ResponseRecord

__all__ = [
    # Engine
    "ChainEngine",
    "DEFAULT_MAX_HOPS",
    "ActionExecutor",
    "ChainContext",
    "HopRecord",
    # Normalizer
    "ReturnType",
    "normalize",
    "return_type_for_content_type",
    "content_type_for_return_type",
    # Records
    "RawOutcome",
    "ResponseRecord",
    "ChainState",
]
