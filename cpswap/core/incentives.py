"""
Incentive distributor.

Pays ``reward_amount`` of a swap's output asset to an actor once every
``swap_count_max`` swaps performed by that same actor.

The protocol has two phases:

1. effect: ``record_swap`` bumps the actor's counter and decides whether a
   reward is owed; ``reserve_reward`` debits the reward budget. Both run inside
   the swap's commit step.
2. interaction: the swap engine transfers the reserved reward after its own
   principal transfers.

Rewards come from a budget funded through ``fund_rewards``, never from pool
reserves, so a payout cannot reduce the constant product.
"""

from __future__ import annotations

from ..state.balances import Amount, AssetId, Identity
from ..state.counters import SwapCounterTable
from .types import ExchangeState


def record_swap(counters: SwapCounterTable, actor: Identity, swap_count_max: int) -> bool:
    """Count one completed swap for ``actor``. Returns True when a reward is now owed."""
    if swap_count_max <= 0:
        raise ValueError(f"swap_count_max must be positive: {swap_count_max}")
    count = counters.get(actor) + 1
    if count >= swap_count_max:
        counters.set(actor, 0)
        return True
    counters.set(actor, count)
    return False


def reserve_reward(state: ExchangeState, asset: AssetId, reward_amount: Amount) -> Amount:
    """Debit up to ``reward_amount`` from the asset's budget and return what was reserved."""
    available = state.reward_budget.get(asset, 0)
    paid = min(reward_amount, available)
    if paid:
        remaining = available - paid
        if remaining:
            state.reward_budget[asset] = remaining
        else:
            del state.reward_budget[asset]
    return paid


def credit_budget(state: ExchangeState, asset: AssetId, amount: Amount) -> Amount:
    """Add ``amount`` to the asset's reward budget and return the new balance."""
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    balance = state.reward_budget.get(asset, 0) + amount
    state.reward_budget[asset] = balance
    return balance
