"""
Holder balance tracking for in-memory asset ledgers.

Implements BalanceTable[Identity] -> Amount
"""

from typing import Dict


# Type aliases
Identity = str  # Caller / holder identity
AssetId = str  # Asset identifier
Amount = int  # Non-negative integer in the asset's smallest unit


class BalanceTable:
    """
    Balance table mapping holder -> amount for a single asset.

    Zero balances are omitted to keep the table sparse. Callers must sort keys
    explicitly wherever iteration order matters.
    """

    def __init__(self):
        self._balances: Dict[Identity, Amount] = {}

    def get(self, holder: Identity) -> Amount:
        """Get balance for holder. Returns 0 if not found."""
        return self._balances.get(holder, 0)

    def set(self, holder: Identity, amount: Amount) -> None:
        """
        Set balance for holder.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def add(self, holder: Identity, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(holder)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(holder, new_balance)

    def subtract(self, holder: Identity, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(holder, -delta)

    def get_all_balances(self) -> Dict[Identity, Amount]:
        return dict(self._balances)

    def restore(self, balances: Dict[Identity, Amount]) -> None:
        """Replace the table contents with a snapshot taken by ``get_all_balances``."""
        self._balances = {k: v for k, v in balances.items() if v != 0}

    def total(self) -> Amount:
        return sum(self._balances.values())

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
