"""Exception types for the constant-product exchange.

Every failure is terminal for the current operation: the engine rolls back the
operation's state changes and re-raises the error unchanged. Each error carries
a stable ``kind`` string plus a ``details`` mapping with the offending values,
so callers can act on it without parsing messages.
"""

from __future__ import annotations

from typing import Any, Mapping


class ExchangeError(Exception):
    """Base class for all exchange failures."""

    kind: str = "ExchangeError"

    def __init__(self, message: str = "", **details: Any) -> None:
        self.details: Mapping[str, Any] = dict(details)
        if not message:
            message = self.kind
        if self.details:
            rendered = ", ".join(f"{k}={v!r}" for k, v in sorted(self.details.items()))
            message = f"{message} ({rendered})"
        super().__init__(message)


class ZeroAmountError(ExchangeError):
    """Raised when a principal amount is zero."""

    kind = "ZeroAmount"


class DeadlineExpiredError(ExchangeError):
    """Raised when the clock is past the caller-supplied deadline."""

    kind = "DeadlineExpired"


class InvalidAssetPairError(ExchangeError):
    """Raised for identical assets or assets the pool does not hold."""

    kind = "InvalidAssetPair"


class SlippageExceededError(ExchangeError):
    """Raised when the executed amount is worse than the caller's bound."""

    kind = "SlippageExceeded"


class LiquidityCapExceededError(ExchangeError):
    """Raised when a deposit would push total shares above the cap."""

    kind = "LiquidityCapExceeded"


class RatioMismatchError(ExchangeError):
    """Raised when a deposit's ratio differs from the reserve ratio beyond tolerance."""

    kind = "RatioMismatch"


class InsufficientSharesError(ExchangeError):
    """Raised when a provider withdraws more shares than they hold."""

    kind = "InsufficientShares"


class PoolArithmeticError(ExchangeError, ArithmeticError):
    """Raised on overflow, empty reserves or a quote that would drain a reserve."""

    kind = "ArithmeticError"


class PausedError(ExchangeError):
    """Raised when a non-administrative operation is attempted while paused."""

    kind = "Paused"


class UnauthorizedError(ExchangeError):
    """Raised when the caller lacks the role an operation requires."""

    kind = "Unauthorized"


class TransferFailedError(ExchangeError):
    """Raised when an asset collaborator rejects a transfer."""

    kind = "TransferFailed"


class InvariantViolationError(ExchangeError):
    """Raised when a state transition would break a pool invariant."""

    kind = "InvariantViolation"

    def __init__(self, violations: list[str], **details: Any) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}", **details)


class ConfigError(ExchangeError, ValueError):
    """Raised when a pool configuration is malformed."""

    kind = "ConfigError"
