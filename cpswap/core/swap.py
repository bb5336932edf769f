"""
Swap engine: validate -> quote -> commit -> transfer.

``plan_exact_input`` / ``plan_exact_output`` are pure: they read the current
pool, quote through the fixed-point kernel and enforce the caller's slippage
bound. ``commit_swap`` is the only step that writes state (pool reserves,
swap counter, reward budget) and returns a ``CommittedSwap``.
``settle_swap`` performs the external transfers and accepts nothing but a
``CommittedSwap``, so transfers cannot run against uncommitted amounts.
"""

from __future__ import annotations

import logging
from typing import Mapping

from ..config import PoolConfig
from ..errors import InvariantViolationError, SlippageExceededError, ZeroAmountError
from ..integration.assets import FungibleAsset, require_transfer
from ..kernels.python.cpmm_math import swap_exact_input, swap_exact_output
from ..state.balances import Amount, AssetId, Identity
from ..state.pools import apply_swap, require_pair
from .incentives import record_swap, reserve_reward
from .types import CommittedSwap, ExchangeState, SwapKind, SwapPlan


logger = logging.getLogger(__name__)


def plan_exact_input(
    state: ExchangeState,
    config: PoolConfig,
    actor: Identity,
    asset_in: AssetId,
    amount_in: Amount,
    asset_out: AssetId,
    min_amount_out: Amount,
) -> SwapPlan:
    pool = state.pool
    require_pair(pool, asset_in, asset_out)
    res = swap_exact_input(
        reserve_in=pool.get_reserve(asset_in),
        reserve_out=pool.get_reserve(asset_out),
        amount_in=amount_in,
        fee_num=config.fee_numerator,
        fee_den=config.fee_denominator,
    )
    if res.amount_out == 0:
        raise ZeroAmountError("quoted output is zero (trade too small)", amount_in=amount_in)
    if res.amount_out < min_amount_out:
        raise SlippageExceededError(
            "output below minimum", quoted_out=res.amount_out, min_amount_out=min_amount_out
        )
    logger.debug("quote exact-in %s->%s in=%d out=%d", asset_in, asset_out, amount_in, res.amount_out)
    return SwapPlan(
        kind=SwapKind.EXACT_INPUT,
        actor=actor,
        asset_in=asset_in,
        asset_out=asset_out,
        amount_in=amount_in,
        amount_out=res.amount_out,
        quoted_pool=pool,
    )


def plan_exact_output(
    state: ExchangeState,
    config: PoolConfig,
    actor: Identity,
    asset_in: AssetId,
    amount_out: Amount,
    asset_out: AssetId,
    max_amount_in: Amount,
) -> SwapPlan:
    pool = state.pool
    require_pair(pool, asset_in, asset_out)
    res = swap_exact_output(
        reserve_in=pool.get_reserve(asset_in),
        reserve_out=pool.get_reserve(asset_out),
        amount_out=amount_out,
        fee_num=config.fee_numerator,
        fee_den=config.fee_denominator,
    )
    if res.amount_in > max_amount_in:
        raise SlippageExceededError(
            "input above maximum", quoted_in=res.amount_in, max_amount_in=max_amount_in
        )
    logger.debug("quote exact-out %s->%s in=%d out=%d", asset_in, asset_out, res.amount_in, amount_out)
    return SwapPlan(
        kind=SwapKind.EXACT_OUTPUT,
        actor=actor,
        asset_in=asset_in,
        asset_out=asset_out,
        amount_in=res.amount_in,
        amount_out=amount_out,
        quoted_pool=pool,
    )


def commit_swap(state: ExchangeState, config: PoolConfig, plan: SwapPlan) -> CommittedSwap:
    """Write the swap into pool state and the actor's counter; reserve any reward."""
    if state.pool is not plan.quoted_pool:
        raise InvariantViolationError(["quote_matches_committed_pool"])

    new_pool = apply_swap(state.pool, plan.asset_in, plan.amount_in, plan.asset_out, plan.amount_out)

    reward_due = record_swap(state.counters, plan.actor, config.swap_count_max)
    reward_amount = reserve_reward(state, plan.asset_out, config.reward_amount) if reward_due else 0
    state.pool = new_pool

    return CommittedSwap(
        kind=plan.kind,
        actor=plan.actor,
        asset_in=plan.asset_in,
        asset_out=plan.asset_out,
        amount_in=plan.amount_in,
        amount_out=plan.amount_out,
        reward_due=reward_due,
        reward_amount=reward_amount,
        reserve_a=new_pool.reserve_a,
        reserve_b=new_pool.reserve_b,
    )


def settle_swap(assets: Mapping[AssetId, FungibleAsset], config: PoolConfig, committed: CommittedSwap) -> None:
    """Move the committed amounts: input in, output out, then the reward."""
    if not isinstance(committed, CommittedSwap):
        raise TypeError("settle_swap requires a CommittedSwap")

    token_in = assets[committed.asset_in]
    token_out = assets[committed.asset_out]

    require_transfer(
        token_in.transfer_from(committed.actor, config.pool_account, committed.amount_in),
        asset=committed.asset_in,
        action="transfer_from",
        owner=committed.actor,
        amount=committed.amount_in,
    )
    require_transfer(
        token_out.transfer(committed.actor, committed.amount_out),
        asset=committed.asset_out,
        action="transfer",
        to=committed.actor,
        amount=committed.amount_out,
    )
    if committed.reward_amount > 0:
        require_transfer(
            token_out.transfer(committed.actor, committed.reward_amount),
            asset=committed.asset_out,
            action="transfer",
            to=committed.actor,
            amount=committed.reward_amount,
        )
