#!/usr/bin/env python3
"""
Offline walk-through of a constant-product pool.

Seeds a pool, runs a batch of swaps for one trader (enough to trigger the swap
reward), then withdraws the provider's position. Prints a line per step.

    python tools/amm_swap_demo.py
    python tools/amm_swap_demo.py --config pool.yaml --swaps 12 --amount-in 250
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

import yaml

from cpswap import ConstantProductExchange, ExchangeError, PoolConfig, load_pool_config
from cpswap.integration import InMemoryAsset, ManualClock


PROVIDER = "provider"
TRADER = "trader"
FUNDER = "deployer"


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    ap.add_argument("--config", help="YAML pool config (defaults: USDC/WETH, 0.3% fee, reward every 10 swaps)")
    ap.add_argument("--reserve-a", type=int, default=100_000)
    ap.add_argument("--reserve-b", type=int, default=100_000)
    ap.add_argument("--swaps", type=int, default=10)
    ap.add_argument("--amount-in", type=int, default=100)
    ap.add_argument("--reward-budget", type=int, default=50)
    ap.add_argument("-v", "--verbose", action="store_true", help="log engine events")
    return ap.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_pool_config(args.config) if args.config else PoolConfig(
            asset_a="USDC", asset_b="WETH", reward_amount=5
        )
    except (OSError, yaml.YAMLError, ExchangeError) as exc:
        print(f"[amm-demo] FAIL (config): {exc}")
        return 2

    clock = ManualClock(start=1_700_000_000)
    deadline = clock.now() + 3600
    token_a = InMemoryAsset(config.asset_a, config.pool_account)
    token_b = InMemoryAsset(config.asset_b, config.pool_account)
    big = 10 ** 30
    for token in (token_a, token_b):
        for holder in (PROVIDER, TRADER, FUNDER):
            token.mint(holder, big)
            token.approve(holder, config.pool_account, big)

    ex = ConstantProductExchange(
        config, {config.asset_a: token_a, config.asset_b: token_b}, FUNDER, clock=clock
    )

    try:
        shares = ex.deposit(PROVIDER, args.reserve_a, args.reserve_b, 1, config.max_total_shares, deadline)
        print(f"[amm-demo] seeded reserves={ex.get_reserves()} shares={shares}")

        if config.reward_amount and args.reward_budget:
            ex.fund_rewards(FUNDER, config.asset_b, args.reward_budget, deadline)
            print(f"[amm-demo] reward budget {config.asset_b}={ex.get_reward_budget(config.asset_b)}")

        for i in range(args.swaps):
            before = token_b.balance_of(TRADER)
            out = ex.swap_exact_input(TRADER, config.asset_a, args.amount_in, config.asset_b, 1, deadline)
            received = token_b.balance_of(TRADER) - before
            print(
                f"[amm-demo] swap {i + 1}: in={args.amount_in} out={out} received={received} "
                f"reserves={ex.get_reserves()} count={ex.get_swap_count(TRADER)}"
            )

        a, b = ex.withdraw(PROVIDER, shares, 0, 0, deadline)
        print(f"[amm-demo] withdrew a={a} b={b} reserves={ex.get_reserves()}")
    except ExchangeError as exc:
        print(f"[amm-demo] FAIL ({exc.kind}): {exc}")
        return 1

    paid = [e for e in ex.events if e.event.value == "RewardPaid"]
    print(f"[amm-demo] events={len(ex.events)} rewards_paid={sum(e.data['amount'] for e in paid)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
