"""Invariant checkers for the exchange state.

Each function returns True when the invariant holds, and ``check_all()``
returns the list of violated invariant IDs (empty = all pass). The engine runs
``check_all`` after every commit and rolls the operation back on a violation.
"""

from __future__ import annotations

from typing import Callable

from ..config import PoolConfig
from .types import ExchangeState


def inv_reserves_non_negative(s: ExchangeState, c: PoolConfig) -> bool:
    return s.pool.reserve_a >= 0 and s.pool.reserve_b >= 0


def inv_initialized_reserves_positive(s: ExchangeState, c: PoolConfig) -> bool:
    if s.pool.total_shares == 0:
        return True
    return s.pool.reserve_a > 0 and s.pool.reserve_b > 0


def inv_empty_pool_zeroed(s: ExchangeState, c: PoolConfig) -> bool:
    if s.pool.total_shares > 0:
        return True
    return s.pool.reserve_a == 0 and s.pool.reserve_b == 0


def inv_share_conservation(s: ExchangeState, c: PoolConfig) -> bool:
    return s.shares.total() == s.pool.total_shares


def inv_shares_within_cap(s: ExchangeState, c: PoolConfig) -> bool:
    return s.pool.total_shares <= c.max_total_shares


def inv_counters_below_threshold(s: ExchangeState, c: PoolConfig) -> bool:
    return all(0 <= n < c.swap_count_max for n in s.counters.get_all().values())


def inv_reward_budget_non_negative(s: ExchangeState, c: PoolConfig) -> bool:
    return all(v >= 0 for v in s.reward_budget.values())


def inv_pool_assets_match_config(s: ExchangeState, c: PoolConfig) -> bool:
    return (s.pool.asset_a, s.pool.asset_b) == (c.asset_a, c.asset_b)


INVARIANT_REGISTRY: dict[str, Callable[[ExchangeState, PoolConfig], bool]] = {
    "inv_reserves_non_negative": inv_reserves_non_negative,
    "inv_initialized_reserves_positive": inv_initialized_reserves_positive,
    "inv_empty_pool_zeroed": inv_empty_pool_zeroed,
    "inv_share_conservation": inv_share_conservation,
    "inv_shares_within_cap": inv_shares_within_cap,
    "inv_counters_below_threshold": inv_counters_below_threshold,
    "inv_reward_budget_non_negative": inv_reward_budget_non_negative,
    "inv_pool_assets_match_config": inv_pool_assets_match_config,
}


def check_all(state: ExchangeState, config: PoolConfig) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state, config)
    ]
