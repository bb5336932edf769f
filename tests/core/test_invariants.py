from __future__ import annotations

from dataclasses import replace

from cpswap.config import PoolConfig
from cpswap.core.invariants import INVARIANT_REGISTRY, check_all
from cpswap.core.types import ExchangeState
from cpswap.state import PoolState


CONFIG = PoolConfig(asset_a="A", asset_b="B", swap_count_max=3, max_total_shares=10_000)


def _healthy() -> ExchangeState:
    s = ExchangeState(pool=PoolState(asset_a="A", asset_b="B", reserve_a=100, reserve_b=400, total_shares=200))
    s.shares.add("lp", 150)
    s.shares.add("alice", 50)
    s.counters.set("alice", 2)
    return s


def test_healthy_state_passes() -> None:
    assert check_all(_healthy(), CONFIG) == []
    assert check_all(ExchangeState(pool=PoolState(asset_a="A", asset_b="B")), CONFIG) == []


def test_share_conservation() -> None:
    s = _healthy()
    s.shares.add("bob", 1)
    assert check_all(s, CONFIG) == ["inv_share_conservation"]


def test_counter_threshold() -> None:
    s = _healthy()
    s.counters.set("alice", 3)
    assert check_all(s, CONFIG) == ["inv_counters_below_threshold"]


def test_share_cap() -> None:
    s = _healthy()
    assert check_all(s, replace(CONFIG, max_total_shares=199)) == ["inv_shares_within_cap"]


def test_reserves_without_shares() -> None:
    s = ExchangeState(pool=PoolState(asset_a="A", asset_b="B", reserve_a=5))
    assert check_all(s, CONFIG) == ["inv_empty_pool_zeroed"]


def test_pool_must_match_config() -> None:
    s = _healthy()
    assert "inv_pool_assets_match_config" in check_all(s, replace(CONFIG, asset_a="C"))


def test_registry_is_complete() -> None:
    assert all(name.startswith("inv_") for name in INVARIANT_REGISTRY)
    assert len(INVARIANT_REGISTRY) == 8
