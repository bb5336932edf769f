"""Data types for the exchange core.

Plans are produced by pure validate+quote functions; ``Committed*`` records
are produced only by the commit step and are the only inputs the transfer
step accepts. Both are frozen dataclasses.

Units: every amount is an integer in the asset's smallest unit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Dict, Mapping

from ..state.balances import Amount, AssetId, Identity
from ..state.counters import SwapCounterTable
from ..state.lp import ShareTable
from ..state.pools import PoolState
from ..state.roles import RoleTable


@unique
class Event(Enum):
    """One member per observable event record."""
    SWAP = "Swap"
    LIQUIDITY_ADDED = "LiquidityAdded"
    LIQUIDITY_REMOVED = "LiquidityRemoved"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"
    REWARD_PAID = "RewardPaid"
    REWARDS_FUNDED = "RewardsFunded"
    ROLE_GRANTED = "RoleGranted"
    ROLE_REVOKED = "RoleRevoked"


@unique
class SwapKind(Enum):
    EXACT_INPUT = "exact_input"
    EXACT_OUTPUT = "exact_output"


@dataclass(frozen=True)
class EventRecord:
    """An emitted event with the operation's final committed values."""

    event: Event
    actor: Identity
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class ExchangeState:
    """Everything the exchange owns. Mutated only by commit steps and admin ops."""

    pool: PoolState
    shares: ShareTable = field(default_factory=ShareTable)
    counters: SwapCounterTable = field(default_factory=SwapCounterTable)
    roles: RoleTable = field(default_factory=RoleTable)
    reward_budget: Dict[AssetId, Amount] = field(default_factory=dict)
    paused: bool = False


# -- swaps --------------------------------------------------------------------

@dataclass(frozen=True)
class SwapPlan:
    kind: SwapKind
    actor: Identity
    asset_in: AssetId
    asset_out: AssetId
    amount_in: Amount
    amount_out: Amount
    # Pool the quote was computed against; commit refuses any other snapshot.
    quoted_pool: PoolState


@dataclass(frozen=True)
class CommittedSwap:
    kind: SwapKind
    actor: Identity
    asset_in: AssetId
    asset_out: AssetId
    amount_in: Amount
    amount_out: Amount
    reward_due: bool
    reward_amount: Amount
    reserve_a: Amount
    reserve_b: Amount


# -- liquidity ----------------------------------------------------------------

@dataclass(frozen=True)
class DepositPlan:
    actor: Identity
    amount_a: Amount
    amount_b: Amount
    shares: Amount
    quoted_pool: PoolState


@dataclass(frozen=True)
class CommittedDeposit:
    actor: Identity
    asset_a: AssetId
    asset_b: AssetId
    amount_a: Amount
    amount_b: Amount
    shares: Amount
    total_shares: Amount


@dataclass(frozen=True)
class WithdrawPlan:
    actor: Identity
    shares: Amount
    amount_a: Amount
    amount_b: Amount
    quoted_pool: PoolState


@dataclass(frozen=True)
class CommittedWithdrawal:
    actor: Identity
    asset_a: AssetId
    asset_b: AssetId
    amount_a: Amount
    amount_b: Amount
    shares: Amount
    total_shares: Amount
