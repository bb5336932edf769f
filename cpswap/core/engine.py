"""
Public surface of the constant-product exchange.

``ConstantProductExchange`` wires the guard layer, swap engine, liquidity
manager and incentive distributor around one ``ExchangeState``. Every mutating
entry point follows the same shape:

1. guards (pause, zero amount, deadline, role) against the pre-state,
2. a pure plan (validate + quote) from the current pool snapshot,
3. exactly one commit step, followed by an invariant check,
4. external asset transfers using only the committed record,
5. an event record carrying the committed amounts.

The whole sequence runs in an atomic section: any exception restores the
state, the event log and every journaled asset ledger to what they were when
the operation started, then propagates unchanged. Reentrant calls made from an
asset during step 4 see the already committed state and get their own atomic
section. Subscribers are called only after the outermost section finishes
cleanly, so they never see a record that was later rolled back.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from ..config import PoolConfig
from ..errors import ConfigError, InvalidAssetPairError, InvariantViolationError
from ..integration.assets import FungibleAsset, Journaled, require_transfer
from ..integration.clock import Clock, SystemClock
from ..kernels.python import cpmm_math
from ..state.balances import Amount, AssetId, Identity
from ..state.pools import PoolState, require_pair
from ..state.roles import Role
from .guards import guard_entry, require_non_negative, require_pool_pair, require_role
from .incentives import credit_budget
from .invariants import check_all
from .liquidity import (
    commit_deposit,
    commit_withdraw,
    plan_deposit,
    plan_withdraw,
    settle_deposit,
    settle_withdraw,
)
from .swap import commit_swap, plan_exact_input, plan_exact_output, settle_swap
from .types import CommittedSwap, Event, EventRecord, ExchangeState


logger = logging.getLogger(__name__)

Subscriber = Callable[[EventRecord], None]


class ConstantProductExchange:
    """
    Two-asset constant-product pool with per-actor swap incentives.

    Args:
        config: Deployment parameters.
        assets: Asset collaborators keyed by asset id; must cover both pool assets.
        deployer: Identity granted ``ADMIN`` and ``PAUSER`` at construction.
        clock: Time source for deadline checks (defaults to wall-clock seconds).
    """

    def __init__(
        self,
        config: PoolConfig,
        assets: Mapping[AssetId, FungibleAsset],
        deployer: Identity,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        missing = [a for a in (config.asset_a, config.asset_b) if a not in assets]
        if missing:
            raise ConfigError("no asset collaborator for pool asset", assets=missing)

        self._config = config
        self._assets: Dict[AssetId, FungibleAsset] = {a: assets[a] for a in (config.asset_a, config.asset_b)}
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._state = ExchangeState(pool=PoolState(asset_a=config.asset_a, asset_b=config.asset_b))
        self._events: List[EventRecord] = []
        self._subscribers: List[Subscriber] = []
        # Records waiting for the outermost atomic section to finish cleanly.
        self._pending: List[EventRecord] = []
        self._depth = 0

        for role in Role:
            self._state.roles.grant(deployer, role)

        logger.info(
            "Exchange deployed",
            extra={
                "event": "exchange.deployed",
                "pair": f"{config.asset_a}/{config.asset_b}",
                "fee": f"{config.fee_numerator}/{config.fee_denominator}",
                "deployer": deployer,
            },
        )

    # ==================== Atomicity ====================

    def _snapshot(self) -> Tuple[Any, ...]:
        s = self._state
        ledgers = [(a, a.checkpoint()) for a in self._assets.values() if isinstance(a, Journaled)]
        return (
            s.pool,
            s.shares.get_all(),
            s.counters.get_all(),
            s.roles.get_all(),
            dict(s.reward_budget),
            s.paused,
            len(self._events),
            len(self._pending),
            ledgers,
        )

    def _restore(self, snap: Tuple[Any, ...]) -> None:
        pool, shares, counters, roles, budget, paused, n_events, n_pending, ledgers = snap
        s = self._state
        s.pool = pool
        s.shares.restore(shares)
        s.counters.restore(counters)
        s.roles.restore(roles)
        s.reward_budget = budget
        s.paused = paused
        del self._events[n_events:]
        del self._pending[n_pending:]
        for asset, token in ledgers:
            asset.rollback(token)

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        snap = self._snapshot()
        self._depth += 1
        try:
            yield
            if self._depth == 1:
                self._deliver()
        except Exception as exc:
            self._restore(snap)
            logger.warning(
                "Operation rolled back",
                extra={"event": f"exchange.{operation}.rolled_back", "error": type(exc).__name__},
            )
            raise
        finally:
            self._depth -= 1

    def _check_invariants(self) -> None:
        violations = check_all(self._state, self._config)
        if violations:
            raise InvariantViolationError(violations)

    def _emit(self, event: Event, actor: Identity, **data: Any) -> EventRecord:
        record = EventRecord(event=event, actor=actor, data=data)
        self._events.append(record)
        self._pending.append(record)
        return record

    def _deliver(self) -> None:
        """Hand queued records to subscribers once no enclosing operation can still roll back."""
        while self._pending:
            record = self._pending.pop(0)
            for fn in list(self._subscribers):
                fn(record)

    # ==================== Swaps ====================

    def swap_exact_input(
        self,
        caller: Identity,
        asset_in: AssetId,
        amount_in: Amount,
        asset_out: AssetId,
        min_amount_out: Amount,
        deadline: int,
    ) -> Amount:
        """Sell exactly ``amount_in`` of ``asset_in``. Returns the output amount received."""
        with self._atomic("swap_exact_input"):
            guard_entry(self._state, self._clock, operation="swap_exact_input", deadline=deadline, amount_in=amount_in)
            require_non_negative(min_amount_out=min_amount_out)
            require_pool_pair(self._state, asset_in, asset_out)

            plan = plan_exact_input(self._state, self._config, caller, asset_in, amount_in, asset_out, min_amount_out)
            committed = commit_swap(self._state, self._config, plan)
            self._check_invariants()

            settle_swap(self._assets, self._config, committed)
            self._emit_swap(committed)
            return committed.amount_out

    def swap_exact_output(
        self,
        caller: Identity,
        asset_in: AssetId,
        amount_out: Amount,
        asset_out: AssetId,
        max_amount_in: Amount,
        deadline: int,
    ) -> Amount:
        """Buy exactly ``amount_out`` of ``asset_out``. Returns the input amount paid."""
        with self._atomic("swap_exact_output"):
            guard_entry(self._state, self._clock, operation="swap_exact_output", deadline=deadline, amount_out=amount_out)
            require_non_negative(max_amount_in=max_amount_in)
            require_pool_pair(self._state, asset_in, asset_out)

            plan = plan_exact_output(self._state, self._config, caller, asset_in, amount_out, asset_out, max_amount_in)
            committed = commit_swap(self._state, self._config, plan)
            self._check_invariants()

            settle_swap(self._assets, self._config, committed)
            self._emit_swap(committed)
            return committed.amount_in

    def _emit_swap(self, committed: CommittedSwap) -> None:
        self._emit(
            Event.SWAP,
            committed.actor,
            kind=committed.kind.value,
            asset_in=committed.asset_in,
            asset_out=committed.asset_out,
            amount_in=committed.amount_in,
            amount_out=committed.amount_out,
            reserve_a=committed.reserve_a,
            reserve_b=committed.reserve_b,
        )
        logger.info(
            "Swap executed",
            extra={
                "event": "exchange.swap",
                "actor": committed.actor,
                "pair": f"{committed.asset_in}/{committed.asset_out}",
                "amount_in": committed.amount_in,
                "amount_out": committed.amount_out,
            },
        )
        if committed.reward_due:
            self._emit(
                Event.REWARD_PAID,
                committed.actor,
                asset=committed.asset_out,
                amount=committed.reward_amount,
                requested=self._config.reward_amount,
            )
            logger.info(
                "Swap reward paid",
                extra={
                    "event": "exchange.reward",
                    "actor": committed.actor,
                    "asset": committed.asset_out,
                    "amount": committed.reward_amount,
                },
            )

    # ==================== Liquidity ====================

    def deposit(
        self,
        caller: Identity,
        amount_a: Amount,
        amount_b: Amount,
        min_shares_out: Amount,
        max_total_shares_after: Amount,
        deadline: int,
    ) -> Amount:
        """Add liquidity. Returns the number of shares minted to ``caller``."""
        with self._atomic("deposit"):
            guard_entry(
                self._state, self._clock, operation="deposit", deadline=deadline, amount_a=amount_a, amount_b=amount_b
            )
            require_non_negative(min_shares_out=min_shares_out, max_total_shares_after=max_total_shares_after)

            plan = plan_deposit(
                self._state, self._config, caller, amount_a, amount_b, min_shares_out, max_total_shares_after
            )
            committed = commit_deposit(self._state, plan)
            self._check_invariants()

            settle_deposit(self._assets, self._config, committed)
            self._emit(
                Event.LIQUIDITY_ADDED,
                caller,
                amount_a=committed.amount_a,
                amount_b=committed.amount_b,
                shares=committed.shares,
                total_shares=committed.total_shares,
            )
            logger.info(
                "Liquidity added",
                extra={
                    "event": "exchange.liquidity_added",
                    "actor": caller,
                    "amounts": (committed.amount_a, committed.amount_b),
                    "shares": committed.shares,
                },
            )
            return committed.shares

    def withdraw(
        self,
        caller: Identity,
        shares_in: Amount,
        min_amount_a_out: Amount,
        min_amount_b_out: Amount,
        deadline: int,
    ) -> Tuple[Amount, Amount]:
        """Burn ``shares_in``. Returns ``(amount_a, amount_b)`` sent to ``caller``."""
        with self._atomic("withdraw"):
            guard_entry(self._state, self._clock, operation="withdraw", deadline=deadline, shares_in=shares_in)
            require_non_negative(min_amount_a_out=min_amount_a_out, min_amount_b_out=min_amount_b_out)

            plan = plan_withdraw(self._state, caller, shares_in, min_amount_a_out, min_amount_b_out)
            committed = commit_withdraw(self._state, plan)
            self._check_invariants()

            settle_withdraw(self._assets, committed)
            self._emit(
                Event.LIQUIDITY_REMOVED,
                caller,
                amount_a=committed.amount_a,
                amount_b=committed.amount_b,
                shares=committed.shares,
                total_shares=committed.total_shares,
            )
            logger.info(
                "Liquidity removed",
                extra={
                    "event": "exchange.liquidity_removed",
                    "actor": caller,
                    "amounts": (committed.amount_a, committed.amount_b),
                    "shares": committed.shares,
                },
            )
            return committed.amount_a, committed.amount_b

    # ==================== Incentive budget ====================

    def fund_rewards(self, caller: Identity, asset: AssetId, amount: Amount, deadline: int) -> Amount:
        """Top up the swap-reward budget for ``asset``. Returns the new budget."""
        with self._atomic("fund_rewards"):
            guard_entry(self._state, self._clock, operation="fund_rewards", deadline=deadline, amount=amount)
            if asset not in self._state.pool.assets:
                raise InvalidAssetPairError("asset not in pool", asset=asset)

            balance = credit_budget(self._state, asset, amount)
            self._check_invariants()

            require_transfer(
                self._assets[asset].transfer_from(caller, self._config.pool_account, amount),
                asset=asset,
                action="transfer_from",
                owner=caller,
                amount=amount,
            )
            self._emit(Event.REWARDS_FUNDED, caller, asset=asset, amount=amount, budget=balance)
            logger.info(
                "Reward budget funded",
                extra={"event": "exchange.rewards_funded", "actor": caller, "asset": asset, "amount": amount},
            )
            return balance

    # ==================== Administration ====================

    def pause(self, caller: Identity) -> bool:
        """Stop swaps and liquidity changes. Returns False if already paused."""
        with self._atomic("pause"):
            require_role(self._state, caller, Role.PAUSER)
            if self._state.paused:
                return False
            self._state.paused = True
            self._emit(Event.PAUSED, caller)
            logger.info("Exchange paused", extra={"event": "exchange.paused", "actor": caller})
            return True

    def unpause(self, caller: Identity) -> bool:
        """Resume normal operation. Returns False if not paused."""
        with self._atomic("unpause"):
            require_role(self._state, caller, Role.PAUSER)
            if not self._state.paused:
                return False
            self._state.paused = False
            self._emit(Event.UNPAUSED, caller)
            logger.info("Exchange unpaused", extra={"event": "exchange.unpaused", "actor": caller})
            return True

    def grant_role(self, caller: Identity, account: Identity, role: Role) -> bool:
        with self._atomic("grant_role"):
            require_role(self._state, caller, Role.ADMIN)
            changed = self._state.roles.grant(account, role)
            if changed:
                self._emit(Event.ROLE_GRANTED, caller, account=account, role=role.value)
                logger.info(
                    "Role granted",
                    extra={"event": "exchange.role_granted", "actor": caller, "account": account, "role": role.value},
                )
            return changed

    def revoke_role(self, caller: Identity, account: Identity, role: Role) -> bool:
        with self._atomic("revoke_role"):
            require_role(self._state, caller, Role.ADMIN)
            changed = self._state.roles.revoke(account, role)
            if changed:
                self._emit(Event.ROLE_REVOKED, caller, account=account, role=role.value)
                logger.info(
                    "Role revoked",
                    extra={"event": "exchange.role_revoked", "actor": caller, "account": account, "role": role.value},
                )
            return changed

    def subscribe(self, fn: Subscriber) -> None:
        """Call ``fn`` with every event record as it is emitted."""
        self._subscribers.append(fn)

    # ==================== Queries ====================

    @property
    def config(self) -> PoolConfig:
        return self._config

    @property
    def pool(self) -> PoolState:
        return self._state.pool

    @property
    def events(self) -> Tuple[EventRecord, ...]:
        return tuple(self._events)

    def get_reserves(self) -> Tuple[Amount, Amount]:
        return self._state.pool.reserve_a, self._state.pool.reserve_b

    def get_total_shares(self) -> Amount:
        return self._state.pool.total_shares

    def get_shares(self, owner: Identity) -> Amount:
        return self._state.shares.get(owner)

    def get_positions(self) -> Dict[Identity, Amount]:
        return self._state.shares.get_all()

    def get_swap_count(self, actor: Identity) -> int:
        return self._state.counters.get(actor)

    def get_reward_budget(self, asset: AssetId) -> Amount:
        return self._state.reward_budget.get(asset, 0)

    def has_role(self, account: Identity, role: Role) -> bool:
        return self._state.roles.has_role(account, role)

    def is_paused(self) -> bool:
        return self._state.paused

    def quote_output_for_input(self, asset_in: AssetId, amount_in: Amount, asset_out: AssetId) -> Amount:
        pool = self._state.pool
        require_pair(pool, asset_in, asset_out)
        return cpmm_math.quote_output_for_input(
            amount_in,
            pool.get_reserve(asset_in),
            pool.get_reserve(asset_out),
            self._config.fee_numerator,
            self._config.fee_denominator,
        )

    def quote_input_for_output(self, asset_in: AssetId, amount_out: Amount, asset_out: AssetId) -> Amount:
        pool = self._state.pool
        require_pair(pool, asset_in, asset_out)
        return cpmm_math.quote_input_for_output(
            amount_out,
            pool.get_reserve(asset_in),
            pool.get_reserve(asset_out),
            self._config.fee_numerator,
            self._config.fee_denominator,
        )

    def __repr__(self) -> str:
        return f"ConstantProductExchange({self._state.pool!r}, paused={self._state.paused})"
