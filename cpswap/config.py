"""
Pool configuration.

``PoolConfig`` is fixed at deployment. It can be built directly, from a plain
mapping (``pool_config_from_dict``) or from a YAML document
(``load_pool_config``), e.g.::

    asset_a: "USDC"
    asset_b: "WETH"
    pool_account: "pool:usdc-weth"
    fee_numerator: 997
    fee_denominator: 1000
    max_total_shares: 1000000000000
    swap_count_max: 10
    reward_amount: 5
    ratio_tolerance_bps: 100
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError
from .kernels.python.cpmm_math import UINT256_MAX
from .kernels.python.lp_math import BPS_DENOM
from .state.balances import AssetId, Identity


DEFAULT_FEE_NUMERATOR = 997
DEFAULT_FEE_DENOMINATOR = 1000
DEFAULT_RATIO_TOLERANCE_BPS = 100


def _require_int(name: str, value: Any) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigError(f"{name} must be an int", **{name: value})
    return value


@dataclass(frozen=True)
class PoolConfig:
    """Immutable deployment parameters of a pool."""

    asset_a: AssetId
    asset_b: AssetId
    pool_account: Identity = "pool"
    fee_numerator: int = DEFAULT_FEE_NUMERATOR
    fee_denominator: int = DEFAULT_FEE_DENOMINATOR
    max_total_shares: int = UINT256_MAX
    swap_count_max: int = 10
    reward_amount: int = 0
    ratio_tolerance_bps: int = DEFAULT_RATIO_TOLERANCE_BPS

    def __post_init__(self) -> None:
        for name in ("asset_a", "asset_b", "pool_account"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{name} must be a non-empty string", **{name: value})
        if self.asset_a == self.asset_b:
            raise ConfigError("asset_a and asset_b must differ", asset_a=self.asset_a)

        for name in (
            "fee_numerator",
            "fee_denominator",
            "max_total_shares",
            "swap_count_max",
            "reward_amount",
            "ratio_tolerance_bps",
        ):
            _require_int(name, getattr(self, name))

        if not (0 < self.fee_numerator <= self.fee_denominator):
            raise ConfigError(
                "fee must satisfy 0 < fee_numerator <= fee_denominator",
                fee_numerator=self.fee_numerator,
                fee_denominator=self.fee_denominator,
            )
        if not (0 < self.max_total_shares <= UINT256_MAX):
            raise ConfigError("max_total_shares must be in (0, 2**256)", max_total_shares=self.max_total_shares)
        if self.swap_count_max <= 0:
            raise ConfigError("swap_count_max must be positive", swap_count_max=self.swap_count_max)
        if self.reward_amount < 0:
            raise ConfigError("reward_amount must be non-negative", reward_amount=self.reward_amount)
        if not (0 <= self.ratio_tolerance_bps <= BPS_DENOM):
            raise ConfigError(
                f"ratio_tolerance_bps must be in [0, {BPS_DENOM}]", ratio_tolerance_bps=self.ratio_tolerance_bps
            )


CONFIG_KEYS: tuple[str, ...] = tuple(f.name for f in fields(PoolConfig))


def pool_config_from_dict(d: Mapping[str, Any]) -> PoolConfig:
    """Build a ``PoolConfig`` from a mapping. Unknown keys are rejected."""
    if not isinstance(d, Mapping):
        raise ConfigError("pool config must be a mapping")
    unknown = sorted(set(d) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigError("unknown pool config keys", keys=unknown)
    missing = [k for k in ("asset_a", "asset_b") if k not in d]
    if missing:
        raise ConfigError("missing pool config keys", keys=missing)
    return PoolConfig(**dict(d))


def pool_config_to_dict(config: PoolConfig) -> dict[str, Any]:
    return {name: getattr(config, name) for name in CONFIG_KEYS}


def load_pool_config(path: Path | str) -> PoolConfig:
    """Load a ``PoolConfig`` from a YAML file (top-level mapping, optionally under a ``pool`` key)."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if isinstance(obj, Mapping) and set(obj) == {"pool"}:
        obj = obj["pool"]
    if not isinstance(obj, Mapping):
        raise ConfigError("pool config YAML must be a mapping", path=str(path))
    return pool_config_from_dict(obj)
