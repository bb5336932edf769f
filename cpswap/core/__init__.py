"""
Exchange core: guards, swap engine, liquidity manager, incentives and the
``ConstantProductExchange`` entry point that ties them together.
"""

from .engine import ConstantProductExchange
from .invariants import INVARIANT_REGISTRY, check_all
from .types import Event, EventRecord, ExchangeState, SwapKind

__all__ = [
    "ConstantProductExchange",
    "INVARIANT_REGISTRY",
    "check_all",
    "Event",
    "EventRecord",
    "ExchangeState",
    "SwapKind",
]
