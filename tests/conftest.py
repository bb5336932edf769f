from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import pytest

from cpswap import ConstantProductExchange, PoolConfig
from cpswap.integration import InMemoryAsset, ManualClock


START = 1_000
DEADLINE = 2_000
FUNDED = 10**12
ACCOUNTS = ("admin", "lp", "alice", "bob", "carol")


@dataclass
class Harness:
    ex: ConstantProductExchange
    config: PoolConfig
    token_a: InMemoryAsset
    token_b: InMemoryAsset
    clock: ManualClock

    def balances(self, holder: str) -> tuple[int, int]:
        return self.token_a.balance_of(holder), self.token_b.balance_of(holder)

    def seed(self, amount_a: int = 1000, amount_b: int = 1000, provider: str = "lp") -> int:
        return self.ex.deposit(provider, amount_a, amount_b, 0, self.config.max_total_shares, DEADLINE)


def build_harness(**overrides) -> Harness:
    params = {"asset_a": "A", "asset_b": "B"}
    params.update(overrides)
    config = PoolConfig(**params)
    token_a = InMemoryAsset(config.asset_a, config.pool_account)
    token_b = InMemoryAsset(config.asset_b, config.pool_account)
    for token in (token_a, token_b):
        for holder in ACCOUNTS:
            token.mint(holder, FUNDED)
            token.approve(holder, config.pool_account, FUNDED)
    clock = ManualClock(start=START)
    ex = ConstantProductExchange(config, {config.asset_a: token_a, config.asset_b: token_b}, "admin", clock=clock)
    return Harness(ex=ex, config=config, token_a=token_a, token_b=token_b, clock=clock)


@pytest.fixture
def make_harness() -> Callable[..., Harness]:
    return build_harness


@pytest.fixture
def h() -> Harness:
    return build_harness()
