"""
Per-actor swap counters for the incentive distributor.

Counters are keyed by actor identity; there is no pool-wide counter, so one
actor's swaps never move another actor's reward closer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from .balances import Identity


@dataclass
class SwapCounterTable:
    """Mutable mapping: actor -> swaps completed since the actor's last reward."""

    _counts: Dict[Identity, int] = field(default_factory=dict)

    def get(self, actor: Identity) -> int:
        return self._counts.get(actor, 0)

    def set(self, actor: Identity, count: int) -> None:
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise TypeError("count must be a non-negative int")
        if count == 0:
            self._counts.pop(actor, None)
        else:
            self._counts[actor] = count

    def get_all(self) -> Mapping[Identity, int]:
        return dict(self._counts)

    def restore(self, snapshot: Mapping[Identity, int]) -> None:
        self._counts = {k: v for k, v in snapshot.items() if v != 0}
