"""Guard functions applied at every public entry point.

Each guard is a pure check over the pre-state and the call's arguments that
raises a typed error when the call is not allowed. Guards never mutate state,
so they can be evaluated in any order; the engine runs all of them before the
first state change.
"""

from __future__ import annotations

from ..errors import DeadlineExpiredError, PausedError, UnauthorizedError, ZeroAmountError
from ..integration.clock import Clock
from ..state.balances import AssetId, Identity
from ..state.pools import require_pair
from ..state.roles import Role
from .types import ExchangeState


def require_not_paused(state: ExchangeState, operation: str) -> None:
    if state.paused:
        raise PausedError("exchange is paused", operation=operation)


def require_nonzero(**amounts: int) -> None:
    for name, value in amounts.items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{name} must be an int")
        if value < 0:
            raise ValueError(f"{name} must be non-negative: {value}")
        if value == 0:
            raise ZeroAmountError(f"{name} must be non-zero", **{name: value})


def require_non_negative(**bounds: int) -> None:
    """Slippage bounds and caps may be zero but must be non-negative ints."""
    for name, value in bounds.items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{name} must be an int")
        if value < 0:
            raise ValueError(f"{name} must be non-negative: {value}")


def require_not_expired(clock: Clock, deadline: int) -> None:
    now = clock.now()
    if now > deadline:
        raise DeadlineExpiredError("deadline passed", now=now, deadline=deadline)


def require_role(state: ExchangeState, caller: Identity, role: Role) -> None:
    if not state.roles.has_role(caller, role):
        raise UnauthorizedError("caller lacks role", caller=caller, role=role.value)


def require_pool_pair(state: ExchangeState, asset_in: AssetId, asset_out: AssetId) -> None:
    require_pair(state.pool, asset_in, asset_out)


def guard_entry(state: ExchangeState, clock: Clock, *, operation: str, deadline: int, **amounts: int) -> None:
    """Pause, zero-amount and deadline checks shared by every trading/liquidity entry point."""
    require_not_paused(state, operation)
    require_nonzero(**amounts)
    require_not_expired(clock, deadline)
