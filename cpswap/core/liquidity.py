"""
Liquidity manager: deposit and withdraw proportional pool shares.

Same discipline as the swap engine: pure ``plan_*`` functions validate and
quote, ``commit_*`` is the single state write (through
``apply_liquidity_change``), and ``settle_*`` moves assets using only the
committed record.

Deposit rules:
    empty pool:    shares = floor(sqrt(amount_a * amount_b))
    otherwise:     shares = min(floor(amount_a * total / reserve_a),
                                floor(amount_b * total / reserve_b))
    The deposit ratio must match the reserve ratio within
    ``PoolConfig.ratio_tolerance_bps``. Both amounts are taken in full; any
    rounding surplus accrues to existing holders.

Withdraw rules:
    amount_x = floor(reserve_x * shares / total)
"""

from __future__ import annotations

import logging
from typing import Mapping

from ..config import PoolConfig
from ..errors import (
    InsufficientSharesError,
    InvariantViolationError,
    LiquidityCapExceededError,
    RatioMismatchError,
    SlippageExceededError,
    ZeroAmountError,
)
from ..integration.assets import FungibleAsset, require_transfer
from ..kernels.python.lp_math import burn_shares, mint_shares, ratio_deviation_bps
from ..state.balances import Amount, AssetId, Identity
from ..state.pools import apply_liquidity_change
from .types import CommittedDeposit, CommittedWithdrawal, DepositPlan, ExchangeState, WithdrawPlan


logger = logging.getLogger(__name__)


def plan_deposit(
    state: ExchangeState,
    config: PoolConfig,
    actor: Identity,
    amount_a: Amount,
    amount_b: Amount,
    min_shares_out: Amount,
    max_total_shares_after: Amount,
) -> DepositPlan:
    pool = state.pool

    if pool.is_initialized:
        deviation = ratio_deviation_bps(
            reserve_a=pool.reserve_a, reserve_b=pool.reserve_b, amount_a=amount_a, amount_b=amount_b
        )
        if deviation > config.ratio_tolerance_bps:
            raise RatioMismatchError(
                "deposit ratio differs from reserve ratio",
                deviation_bps=deviation,
                tolerance_bps=config.ratio_tolerance_bps,
                amount_a=amount_a,
                amount_b=amount_b,
                reserve_a=pool.reserve_a,
                reserve_b=pool.reserve_b,
            )

    mint = mint_shares(
        reserve_a=pool.reserve_a,
        reserve_b=pool.reserve_b,
        total_shares=pool.total_shares,
        amount_a=amount_a,
        amount_b=amount_b,
    )
    if mint.shares == 0:
        raise ZeroAmountError("deposit too small to mint shares", amount_a=amount_a, amount_b=amount_b)

    cap = min(config.max_total_shares, max_total_shares_after)
    if mint.new_total_shares > cap:
        raise LiquidityCapExceededError(
            "deposit would exceed the share cap",
            total_shares=pool.total_shares,
            shares_out=mint.shares,
            cap=cap,
        )
    if mint.shares < min_shares_out:
        raise SlippageExceededError("shares below minimum", shares_out=mint.shares, min_shares_out=min_shares_out)

    logger.debug("quote deposit a=%d b=%d shares=%d", amount_a, amount_b, mint.shares)

    return DepositPlan(actor=actor, amount_a=amount_a, amount_b=amount_b, shares=mint.shares, quoted_pool=pool)


def commit_deposit(state: ExchangeState, plan: DepositPlan) -> CommittedDeposit:
    if state.pool is not plan.quoted_pool:
        raise InvariantViolationError(["quote_matches_committed_pool"])

    new_pool = apply_liquidity_change(state.pool, plan.amount_a, plan.amount_b, plan.shares)
    state.shares.add(plan.actor, plan.shares)
    state.pool = new_pool

    return CommittedDeposit(
        actor=plan.actor,
        asset_a=new_pool.asset_a,
        asset_b=new_pool.asset_b,
        amount_a=plan.amount_a,
        amount_b=plan.amount_b,
        shares=plan.shares,
        total_shares=new_pool.total_shares,
    )


def settle_deposit(assets: Mapping[AssetId, FungibleAsset], config: PoolConfig, committed: CommittedDeposit) -> None:
    if not isinstance(committed, CommittedDeposit):
        raise TypeError("settle_deposit requires a CommittedDeposit")
    for asset, amount in ((committed.asset_a, committed.amount_a), (committed.asset_b, committed.amount_b)):
        require_transfer(
            assets[asset].transfer_from(committed.actor, config.pool_account, amount),
            asset=asset,
            action="transfer_from",
            owner=committed.actor,
            amount=amount,
        )


def plan_withdraw(
    state: ExchangeState,
    actor: Identity,
    shares_in: Amount,
    min_amount_a_out: Amount,
    min_amount_b_out: Amount,
) -> WithdrawPlan:
    pool = state.pool
    held = state.shares.get(actor)
    if held < shares_in:
        raise InsufficientSharesError("not enough shares", held=held, shares_in=shares_in)

    burn = burn_shares(
        shares=shares_in,
        reserve_a=pool.reserve_a,
        reserve_b=pool.reserve_b,
        total_shares=pool.total_shares,
    )
    if burn.amount_a < min_amount_a_out or burn.amount_b < min_amount_b_out:
        raise SlippageExceededError(
            "withdrawal below minimum",
            amount_a=burn.amount_a,
            amount_b=burn.amount_b,
            min_amount_a_out=min_amount_a_out,
            min_amount_b_out=min_amount_b_out,
        )

    logger.debug("quote withdraw shares=%d a=%d b=%d", shares_in, burn.amount_a, burn.amount_b)

    return WithdrawPlan(
        actor=actor, shares=shares_in, amount_a=burn.amount_a, amount_b=burn.amount_b, quoted_pool=pool
    )


def commit_withdraw(state: ExchangeState, plan: WithdrawPlan) -> CommittedWithdrawal:
    if state.pool is not plan.quoted_pool:
        raise InvariantViolationError(["quote_matches_committed_pool"])

    new_pool = apply_liquidity_change(state.pool, -plan.amount_a, -plan.amount_b, -plan.shares)
    state.shares.subtract(plan.actor, plan.shares)
    state.pool = new_pool

    return CommittedWithdrawal(
        actor=plan.actor,
        asset_a=new_pool.asset_a,
        asset_b=new_pool.asset_b,
        amount_a=plan.amount_a,
        amount_b=plan.amount_b,
        shares=plan.shares,
        total_shares=new_pool.total_shares,
    )


def settle_withdraw(assets: Mapping[AssetId, FungibleAsset], committed: CommittedWithdrawal) -> None:
    if not isinstance(committed, CommittedWithdrawal):
        raise TypeError("settle_withdraw requires a CommittedWithdrawal")
    for asset, amount in ((committed.asset_a, committed.amount_a), (committed.asset_b, committed.amount_b)):
        if amount == 0:
            continue
        require_transfer(
            assets[asset].transfer(committed.actor, amount),
            asset=asset,
            action="transfer",
            to=committed.actor,
            amount=amount,
        )
