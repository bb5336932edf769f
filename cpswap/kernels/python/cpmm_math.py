"""
Constant-product swap kernel with a fractional fee.

Pricing follows the Uniswap-v2 closed forms with the fee expressed as the
fraction of input that takes part in pricing (``fee_num / fee_den``, e.g.
997/1000):

    amount_out = floor(amount_in * fee_num * reserve_out
                       / (reserve_in * fee_den + amount_in * fee_num))

    amount_in  = ceil(reserve_in * amount_out * fee_den
                      / ((reserve_out - amount_out) * fee_num))

Rounding is always in the pool's favor: outputs round down, required inputs
round up. Both guarantee ``(reserve_in + amount_in) * (reserve_out - amount_out)
>= reserve_in * reserve_out``.

All arithmetic is on Python ints, but every product is checked against a
256-bit working width so results stay representable by an on-chain
implementation. Overflow is an error, never a wrap.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ...errors import PoolArithmeticError


WORD_BITS = 256
UINT256_MAX = (1 << WORD_BITS) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise PoolArithmeticError(f"{name} must be non-negative", **{name: value})


def checked_mul(a: int, b: int) -> int:
    """Multiply two non-negative ints, failing if the product exceeds the word width."""
    product = a * b
    if product > UINT256_MAX:
        raise PoolArithmeticError("multiplication overflow", a=a, b=b)
    return product


def checked_add(a: int, b: int) -> int:
    total = a + b
    if total > UINT256_MAX:
        raise PoolArithmeticError("addition overflow", a=a, b=b)
    return total


def ceil_div(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        raise PoolArithmeticError("division by zero", numerator=numerator, denominator=denominator)
    return (numerator + denominator - 1) // denominator


def floor_div(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        raise PoolArithmeticError("division by zero", numerator=numerator, denominator=denominator)
    return numerator // denominator


def geometric_mean(a: int, b: int) -> int:
    """``floor(sqrt(a * b))`` using integer isqrt (exact for arbitrarily large ints)."""
    _require_int("a", a)
    _require_int("b", b)
    return math.isqrt(checked_mul(a, b))


def _validate_fee(fee_num: int, fee_den: int) -> None:
    _require_int("fee_num", fee_num)
    _require_int("fee_den", fee_den)
    if fee_den == 0 or fee_num == 0 or fee_num > fee_den:
        raise PoolArithmeticError("fee fraction must satisfy 0 < fee_num <= fee_den", fee_num=fee_num, fee_den=fee_den)


def _validate_reserves(reserve_in: int, reserve_out: int) -> None:
    _require_int("reserve_in", reserve_in)
    _require_int("reserve_out", reserve_out)
    if reserve_in == 0 or reserve_out == 0:
        raise PoolArithmeticError("cannot quote against an empty reserve", reserve_in=reserve_in, reserve_out=reserve_out)


def quote_output_for_input(amount_in: int, reserve_in: int, reserve_out: int, fee_num: int, fee_den: int) -> int:
    """Output obtained for an exact input (floor)."""
    _require_int("amount_in", amount_in)
    _validate_reserves(reserve_in, reserve_out)
    _validate_fee(fee_num, fee_den)

    in_with_fee = checked_mul(amount_in, fee_num)
    numerator = checked_mul(in_with_fee, reserve_out)
    denominator = checked_add(checked_mul(reserve_in, fee_den), in_with_fee)
    return floor_div(numerator, denominator)


def quote_input_for_output(amount_out: int, reserve_in: int, reserve_out: int, fee_num: int, fee_den: int) -> int:
    """Input required for an exact output (ceil)."""
    _require_int("amount_out", amount_out)
    _validate_reserves(reserve_in, reserve_out)
    _validate_fee(fee_num, fee_den)
    if amount_out >= reserve_out:
        raise PoolArithmeticError(
            "amount_out would drain the output reserve", amount_out=amount_out, reserve_out=reserve_out
        )

    numerator = checked_mul(checked_mul(reserve_in, amount_out), fee_den)
    denominator = checked_mul(reserve_out - amount_out, fee_num)
    return ceil_div(numerator, denominator)


@dataclass(frozen=True)
class SwapResult:
    amount_in: int
    amount_out: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def _finish(reserve_in: int, reserve_out: int, amount_in: int, amount_out: int) -> SwapResult:
    if amount_out >= reserve_out:
        raise PoolArithmeticError("amount_out would drain the output reserve", amount_out=amount_out, reserve_out=reserve_out)
    new_reserve_in = checked_add(reserve_in, amount_in)
    new_reserve_out = reserve_out - amount_out
    k_before = checked_mul(reserve_in, reserve_out)
    k_after = checked_mul(new_reserve_in, new_reserve_out)
    if k_after < k_before:
        raise PoolArithmeticError("constant product would decrease", k_before=k_before, k_after=k_after)
    return SwapResult(
        amount_in=amount_in,
        amount_out=amount_out,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )


def swap_exact_input(*, reserve_in: int, reserve_out: int, amount_in: int, fee_num: int, fee_den: int) -> SwapResult:
    """Exact-in quote plus post-swap reserves. Fails closed if ``k`` would drop."""
    amount_out = quote_output_for_input(amount_in, reserve_in, reserve_out, fee_num, fee_den)
    return _finish(reserve_in, reserve_out, amount_in, amount_out)


def swap_exact_output(*, reserve_in: int, reserve_out: int, amount_out: int, fee_num: int, fee_den: int) -> SwapResult:
    """Exact-out quote plus post-swap reserves for the requested ``amount_out``."""
    amount_in = quote_input_for_output(amount_out, reserve_in, reserve_out, fee_num, fee_den)
    return _finish(reserve_in, reserve_out, amount_in, amount_out)
