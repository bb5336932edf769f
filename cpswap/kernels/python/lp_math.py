"""
Liquidity share math.

Pure functions with explicit rounding rules:
- initial seed: ``shares = floor(sqrt(amount_a * amount_b))``
- proportional mint: ``min(floor(amount_a * total / reserve_a), floor(amount_b * total / reserve_b))``
- burn: ``floor(reserve_x * shares / total)`` per asset

Every rounding step favors the pool (existing share holders).
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import PoolArithmeticError
from .cpmm_math import checked_add, checked_mul, floor_div, geometric_mean


BPS_DENOM = 10_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise PoolArithmeticError(f"{name} must be non-negative", **{name: value})


@dataclass(frozen=True)
class MintResult:
    shares: int
    new_reserve_a: int
    new_reserve_b: int
    new_total_shares: int


@dataclass(frozen=True)
class BurnResult:
    amount_a: int
    amount_b: int


def ratio_deviation_bps(*, reserve_a: int, reserve_b: int, amount_a: int, amount_b: int) -> int:
    """
    Deviation of ``amount_a : amount_b`` from ``reserve_a : reserve_b`` in basis points.

    Compares the cross products ``amount_a * reserve_b`` and ``amount_b * reserve_a``
    and returns ``ceil(|x - y| * 10_000 / max(x, y))``. The result never exceeds
    10_000, so the scaled difference is not held to the word width.
    """
    for name, v in (("reserve_a", reserve_a), ("reserve_b", reserve_b), ("amount_a", amount_a), ("amount_b", amount_b)):
        _require_int(name, v)
    x = checked_mul(amount_a, reserve_b)
    y = checked_mul(amount_b, reserve_a)
    hi = max(x, y)
    if hi == 0:
        return 0
    diff = hi - min(x, y)
    return -(-(diff * BPS_DENOM) // hi)


def ratio_within_tolerance(*, reserve_a: int, reserve_b: int, amount_a: int, amount_b: int, tolerance_bps: int) -> bool:
    return ratio_deviation_bps(
        reserve_a=reserve_a, reserve_b=reserve_b, amount_a=amount_a, amount_b=amount_b
    ) <= tolerance_bps


def mint_shares(*, reserve_a: int, reserve_b: int, total_shares: int, amount_a: int, amount_b: int) -> MintResult:
    """
    Shares minted for depositing ``(amount_a, amount_b)`` in full.

    An empty pool (``total_shares == 0``) is seeded with the geometric mean.
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_shares", total_shares),
        ("amount_a", amount_a),
        ("amount_b", amount_b),
    ):
        _require_int(name, v)

    if total_shares == 0:
        if reserve_a != 0 or reserve_b != 0:
            raise PoolArithmeticError(
                "cannot seed a pool whose reserves are non-zero", reserve_a=reserve_a, reserve_b=reserve_b
            )
        shares = geometric_mean(amount_a, amount_b)
    else:
        if reserve_a == 0 or reserve_b == 0:
            raise PoolArithmeticError(
                "outstanding shares with an empty reserve", reserve_a=reserve_a, reserve_b=reserve_b
            )
        shares_a = floor_div(checked_mul(amount_a, total_shares), reserve_a)
        shares_b = floor_div(checked_mul(amount_b, total_shares), reserve_b)
        shares = min(shares_a, shares_b)

    return MintResult(
        shares=shares,
        new_reserve_a=checked_add(reserve_a, amount_a),
        new_reserve_b=checked_add(reserve_b, amount_b),
        new_total_shares=checked_add(total_shares, shares),
    )


def burn_shares(*, shares: int, reserve_a: int, reserve_b: int, total_shares: int) -> BurnResult:
    """Underlying amounts returned for burning ``shares`` (floor rounding)."""
    for name, v in (("shares", shares), ("reserve_a", reserve_a), ("reserve_b", reserve_b), ("total_shares", total_shares)):
        _require_int(name, v)
    if total_shares == 0:
        raise PoolArithmeticError("cannot burn from an empty pool")
    if shares > total_shares:
        raise PoolArithmeticError("cannot burn more than total_shares", shares=shares, total_shares=total_shares)

    return BurnResult(
        amount_a=floor_div(checked_mul(reserve_a, shares), total_shares),
        amount_b=floor_div(checked_mul(reserve_b, shares), total_shares),
    )
