"""
Collaborators consumed by the exchange: fungible assets and clocks.
"""

from .assets import FungibleAsset, InMemoryAsset, Journaled
from .clock import Clock, ManualClock, SystemClock

__all__ = [
    "FungibleAsset",
    "InMemoryAsset",
    "Journaled",
    "Clock",
    "ManualClock",
    "SystemClock",
]
