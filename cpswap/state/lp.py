"""
Liquidity share tracking.

Each provider's position is a single integer claim on the pool's
``total_shares``. The engine keeps ``sum(positions) == total_shares``.
"""

from __future__ import annotations

from typing import Dict

from .balances import Amount, Identity


class ShareTable:
    """
    Share table mapping owner -> shares.

    Notes:
    - Shares are always non-negative.
    - Zero positions are removed so a fully withdrawn provider leaves no record.
    """

    def __init__(self) -> None:
        self._shares: Dict[Identity, Amount] = {}

    def get(self, owner: Identity) -> Amount:
        """Get shares held by owner. Returns 0 if not found."""
        return self._shares.get(owner, 0)

    def set(self, owner: Identity, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Share balance cannot be negative: {amount}")
        if amount == 0:
            self._shares.pop(owner, None)
        else:
            self._shares[owner] = amount

    def add(self, owner: Identity, delta: int) -> None:
        """Add delta to a position (delta may be negative)."""
        current = self.get(owner)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient shares: {current} + {delta} = {new_balance} < 0"
            )
        self.set(owner, new_balance)

    def subtract(self, owner: Identity, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(owner, -delta)

    def total(self) -> Amount:
        return sum(self._shares.values())

    def get_all(self) -> Dict[Identity, Amount]:
        return dict(self._shares)

    def restore(self, snapshot: Dict[Identity, Amount]) -> None:
        self._shares = {k: v for k, v in snapshot.items() if v != 0}

    def __repr__(self) -> str:
        return f"ShareTable({len(self._shares)} positions)"
