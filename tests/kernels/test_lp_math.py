from __future__ import annotations

import pytest

from cpswap.errors import PoolArithmeticError
from cpswap.kernels.python.lp_math import (
    burn_shares,
    mint_shares,
    ratio_deviation_bps,
    ratio_within_tolerance,
)


class TestMint:
    def test_seed_uses_geometric_mean(self) -> None:
        res = mint_shares(reserve_a=0, reserve_b=0, total_shares=0, amount_a=1000, amount_b=1000)
        assert res.shares == 1000
        assert (res.new_reserve_a, res.new_reserve_b, res.new_total_shares) == (1000, 1000, 1000)

    def test_seed_unbalanced(self) -> None:
        res = mint_shares(reserve_a=0, reserve_b=0, total_shares=0, amount_a=100, amount_b=400)
        assert res.shares == 200

    def test_seed_with_dangling_reserves_rejected(self) -> None:
        with pytest.raises(PoolArithmeticError):
            mint_shares(reserve_a=5, reserve_b=0, total_shares=0, amount_a=10, amount_b=10)

    def test_proportional_takes_minimum_side(self) -> None:
        res = mint_shares(reserve_a=1000, reserve_b=2000, total_shares=1000, amount_a=100, amount_b=199)
        # a-side: 100; b-side: floor(199*1000/2000) = 99
        assert res.shares == 99

    def test_outstanding_shares_with_empty_reserve_rejected(self) -> None:
        with pytest.raises(PoolArithmeticError):
            mint_shares(reserve_a=0, reserve_b=10, total_shares=10, amount_a=1, amount_b=1)


class TestBurn:
    def test_floor_rounding(self) -> None:
        res = burn_shares(shares=1, reserve_a=10, reserve_b=7, total_shares=3)
        assert (res.amount_a, res.amount_b) == (3, 2)

    def test_full_burn_returns_everything(self) -> None:
        res = burn_shares(shares=3, reserve_a=10, reserve_b=7, total_shares=3)
        assert (res.amount_a, res.amount_b) == (10, 7)

    def test_burn_more_than_supply_rejected(self) -> None:
        with pytest.raises(PoolArithmeticError):
            burn_shares(shares=4, reserve_a=10, reserve_b=7, total_shares=3)

    def test_burn_from_empty_pool_rejected(self) -> None:
        with pytest.raises(PoolArithmeticError):
            burn_shares(shares=0, reserve_a=0, reserve_b=0, total_shares=0)


class TestRatio:
    def test_exact_ratio_has_zero_deviation(self) -> None:
        assert ratio_deviation_bps(reserve_a=1000, reserve_b=2000, amount_a=10, amount_b=20) == 0

    def test_one_percent_deviation(self) -> None:
        # 100*1000 vs 101*1000: |diff| / max = 1/101 -> ceil(99.0099) = 100 bps
        assert ratio_deviation_bps(reserve_a=1000, reserve_b=1000, amount_a=100, amount_b=101) == 100
        assert ratio_within_tolerance(
            reserve_a=1000, reserve_b=1000, amount_a=100, amount_b=101, tolerance_bps=100
        )
        assert not ratio_within_tolerance(
            reserve_a=1000, reserve_b=1000, amount_a=100, amount_b=102, tolerance_bps=100
        )

    def test_deviation_is_symmetric(self) -> None:
        a = ratio_deviation_bps(reserve_a=1000, reserve_b=1000, amount_a=100, amount_b=150)
        b = ratio_deviation_bps(reserve_a=1000, reserve_b=1000, amount_a=150, amount_b=100)
        assert a == b

    def test_cross_products_near_word_width(self) -> None:
        r = 1 << 127
        # cross products are 2**254 and 2**254 + 2**247; deviation = ceil(10_000 / 129)
        assert ratio_deviation_bps(reserve_a=r, reserve_b=r, amount_a=r, amount_b=r + (1 << 120)) == 78
        assert ratio_deviation_bps(reserve_a=r, reserve_b=r, amount_a=r, amount_b=r) == 0
