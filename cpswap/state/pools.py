"""
Pool state for the two-asset constant-product pool.

``PoolState`` is immutable. The two transition functions below are the only
code that produces a pool with different reserves:

- ``apply_swap`` for trades,
- ``apply_liquidity_change`` for deposits and withdrawals.

Both validate the complete post-state before returning it, so a caller that
receives a new ``PoolState`` can commit it with a single assignment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import InvalidAssetPairError, InvariantViolationError, PoolArithmeticError
from .balances import Amount, AssetId


@dataclass(frozen=True)
class PoolState:
    """
    State of the liquidity pool.

    Attributes:
        asset_a: First asset identifier
        asset_b: Second asset identifier
        reserve_a: Reserve amount for asset_a
        reserve_b: Reserve amount for asset_b
        total_shares: Total liquidity shares outstanding
    """
    asset_a: AssetId
    asset_b: AssetId
    reserve_a: Amount = 0
    reserve_b: Amount = 0
    total_shares: Amount = 0

    def __post_init__(self) -> None:
        if self.asset_a == self.asset_b:
            raise InvalidAssetPairError("pool assets must differ", asset_a=self.asset_a, asset_b=self.asset_b)
        if self.reserve_a < 0 or self.reserve_b < 0:
            raise InvariantViolationError(["reserves_non_negative"], reserve_a=self.reserve_a, reserve_b=self.reserve_b)
        if self.total_shares < 0:
            raise InvariantViolationError(["shares_non_negative"], total_shares=self.total_shares)

    @property
    def is_initialized(self) -> bool:
        return self.total_shares > 0

    @property
    def assets(self) -> Tuple[AssetId, AssetId]:
        return self.asset_a, self.asset_b

    def get_reserve(self, asset: AssetId) -> Amount:
        """
        Raises:
            InvalidAssetPairError: If asset is not in this pool
        """
        if asset == self.asset_a:
            return self.reserve_a
        if asset == self.asset_b:
            return self.reserve_b
        raise InvalidAssetPairError("asset not in pool", asset=asset)

    def get_constant_product(self) -> int:
        return self.reserve_a * self.reserve_b

    def __repr__(self) -> str:
        return (
            f"PoolState(assets=({self.asset_a}, {self.asset_b}), "
            f"reserves=({self.reserve_a}, {self.reserve_b}), "
            f"total_shares={self.total_shares})"
        )


def require_pair(pool: PoolState, asset_in: AssetId, asset_out: AssetId) -> None:
    """Both assets must be the pool's two distinct assets."""
    if asset_in == asset_out:
        raise InvalidAssetPairError("asset_in and asset_out must differ", asset_in=asset_in, asset_out=asset_out)
    if asset_in not in pool.assets or asset_out not in pool.assets:
        raise InvalidAssetPairError(
            "asset not in pool", asset_in=asset_in, asset_out=asset_out, pool_assets=pool.assets
        )


def apply_swap(pool: PoolState, asset_in: AssetId, amount_in: Amount, asset_out: AssetId, amount_out: Amount) -> PoolState:
    """
    Credit ``amount_in`` to ``asset_in``'s reserve and debit ``amount_out`` from ``asset_out``'s.

    Raises:
        InvalidAssetPairError: Same asset twice, or an asset outside the pool.
        PoolArithmeticError: Negative amounts or an output that would empty the reserve.
        InvariantViolationError: The constant product would decrease.
    """
    require_pair(pool, asset_in, asset_out)
    if amount_in < 0 or amount_out < 0:
        raise PoolArithmeticError("swap amounts must be non-negative", amount_in=amount_in, amount_out=amount_out)

    reserve_out = pool.get_reserve(asset_out)
    if amount_out >= reserve_out:
        raise PoolArithmeticError("swap would drain the output reserve", amount_out=amount_out, reserve_out=reserve_out)

    if asset_in == pool.asset_a:
        new_a, new_b = pool.reserve_a + amount_in, pool.reserve_b - amount_out
    else:
        new_a, new_b = pool.reserve_a - amount_out, pool.reserve_b + amount_in

    k_before = pool.get_constant_product()
    k_after = new_a * new_b
    if k_after < k_before:
        raise InvariantViolationError(["constant_product_non_decreasing"], k_before=k_before, k_after=k_after)

    return PoolState(
        asset_a=pool.asset_a,
        asset_b=pool.asset_b,
        reserve_a=new_a,
        reserve_b=new_b,
        total_shares=pool.total_shares,
    )


def apply_liquidity_change(pool: PoolState, delta_a: int, delta_b: int, delta_shares: int) -> PoolState:
    """
    Adjust both reserves and the share supply together.

    The result must keep shares and reserves in lock-step: no shares without
    reserves, no reserves without shares, and no loss of per-share backing
    for either asset (``new_r * old_total >= old_r * new_total``). This admits
    proportional deposits (rounding dust stays with the pool) and
    floor-rounded withdrawals, and rejects anything that dilutes existing
    holders.

    Raises:
        InvariantViolationError: If any of the conditions above fail.
    """
    new_a = pool.reserve_a + delta_a
    new_b = pool.reserve_b + delta_b
    new_total = pool.total_shares + delta_shares

    violations = []
    if new_a < 0 or new_b < 0:
        violations.append("reserves_non_negative")
    if new_total < 0:
        violations.append("shares_non_negative")
    if new_total == 0 and (new_a != 0 or new_b != 0):
        violations.append("reserves_without_shares")
    if new_total > 0 and (new_a == 0 or new_b == 0):
        violations.append("shares_without_reserves")
    if pool.total_shares > 0 and new_total > 0:
        if new_a * pool.total_shares < pool.reserve_a * new_total:
            violations.append("backing_a_non_decreasing")
        if new_b * pool.total_shares < pool.reserve_b * new_total:
            violations.append("backing_b_non_decreasing")
    if violations:
        raise InvariantViolationError(
            violations, delta_a=delta_a, delta_b=delta_b, delta_shares=delta_shares
        )

    return PoolState(
        asset_a=pool.asset_a,
        asset_b=pool.asset_b,
        reserve_a=new_a,
        reserve_b=new_b,
        total_shares=new_total,
    )
