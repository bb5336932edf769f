"""
Fungible asset collaborators.

The exchange only talks to assets through the ``FungibleAsset`` protocol, acting
as the pool's custody account:

- ``transfer(to, amount)`` moves tokens out of the pool account,
- ``transfer_from(owner, to, amount)`` pulls tokens the owner approved.

Either call may return ``False`` or raise ``TransferFailedError``; the engine
treats both as a hard failure of the whole operation.

Assets that also implement ``Journaled`` let the engine roll their ledger back
when an operation fails after some transfers already went through.
``InMemoryAsset`` implements both and is what tests and the demo use.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, runtime_checkable

from ..errors import TransferFailedError
from ..state.balances import Amount, AssetId, BalanceTable, Identity


logger = logging.getLogger(__name__)


@runtime_checkable
class FungibleAsset(Protocol):
    def balance_of(self, holder: Identity) -> Amount: ...

    def transfer(self, to: Identity, amount: Amount) -> bool: ...

    def transfer_from(self, owner: Identity, to: Identity, amount: Amount) -> bool: ...


@runtime_checkable
class Journaled(Protocol):
    def checkpoint(self) -> Any: ...

    def rollback(self, token: Any) -> None: ...


TransferHook = Callable[[str, Identity, Identity, Amount], None]


class InMemoryAsset:
    """
    In-memory token ledger with allowances.

    ``operator`` is the account on whose behalf ``transfer`` / ``transfer_from``
    run (the pool account). An optional ``on_transfer`` hook runs after each
    successful movement and may call back into the exchange, which is how
    tests exercise reentrancy.
    """

    def __init__(self, asset_id: AssetId, operator: Identity, *, on_transfer: Optional[TransferHook] = None) -> None:
        self.asset_id = asset_id
        self.operator = operator
        self.on_transfer = on_transfer
        self._balances = BalanceTable()
        self._allowances: Dict[Tuple[Identity, Identity], Amount] = {}

    # -- admin helpers (not part of the protocol) ----------------------------

    def mint(self, holder: Identity, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        self._balances.add(holder, amount)

    def approve(self, owner: Identity, spender: Identity, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"allowance must be non-negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def allowance(self, owner: Identity, spender: Identity) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def total_supply(self) -> Amount:
        return self._balances.total()

    # -- FungibleAsset -------------------------------------------------------

    def balance_of(self, holder: Identity) -> Amount:
        return self._balances.get(holder)

    def transfer(self, to: Identity, amount: Amount) -> bool:
        self._move(self.operator, to, amount)
        self._notify("transfer", self.operator, to, amount)
        return True

    def transfer_from(self, owner: Identity, to: Identity, amount: Amount) -> bool:
        allowed = self.allowance(owner, self.operator)
        if allowed < amount:
            raise TransferFailedError(
                "allowance exceeded", asset=self.asset_id, owner=owner, allowance=allowed, amount=amount
            )
        self._move(owner, to, amount)
        self.approve(owner, self.operator, allowed - amount)
        self._notify("transfer_from", owner, to, amount)
        return True

    def _move(self, sender: Identity, to: Identity, amount: Amount) -> None:
        if amount < 0:
            raise TransferFailedError("negative transfer", asset=self.asset_id, amount=amount)
        balance = self._balances.get(sender)
        if balance < amount:
            raise TransferFailedError(
                "insufficient balance", asset=self.asset_id, holder=sender, balance=balance, amount=amount
            )
        self._balances.subtract(sender, amount)
        self._balances.add(to, amount)
        logger.debug("%s: %s -> %s amount=%d", self.asset_id, sender, to, amount)

    def _notify(self, kind: str, sender: Identity, to: Identity, amount: Amount) -> None:
        if self.on_transfer is not None:
            self.on_transfer(kind, sender, to, amount)

    # -- Journaled -----------------------------------------------------------

    def checkpoint(self) -> Tuple[Dict[Identity, Amount], Dict[Tuple[Identity, Identity], Amount]]:
        return self._balances.get_all_balances(), dict(self._allowances)

    def rollback(self, token: Tuple[Dict[Identity, Amount], Dict[Tuple[Identity, Identity], Amount]]) -> None:
        balances, allowances = token
        self._balances.restore(balances)
        self._allowances = dict(allowances)

    def __repr__(self) -> str:
        return f"InMemoryAsset({self.asset_id!r}, operator={self.operator!r})"


def require_transfer(ok: bool, *, asset: AssetId, action: str, **details: Any) -> None:
    """Convert a ``False`` transfer result into ``TransferFailedError``."""
    if ok is not True:
        raise TransferFailedError(f"{action} returned {ok!r}", asset=asset, **details)
