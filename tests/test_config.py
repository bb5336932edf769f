from __future__ import annotations

import pytest

from cpswap.config import (
    DEFAULT_FEE_DENOMINATOR,
    DEFAULT_FEE_NUMERATOR,
    PoolConfig,
    load_pool_config,
    pool_config_from_dict,
    pool_config_to_dict,
)
from cpswap.errors import ConfigError


def test_defaults() -> None:
    c = PoolConfig(asset_a="A", asset_b="B")
    assert (c.fee_numerator, c.fee_denominator) == (DEFAULT_FEE_NUMERATOR, DEFAULT_FEE_DENOMINATOR)
    assert c.ratio_tolerance_bps == 100
    assert c.pool_account == "pool"


@pytest.mark.parametrize(
    "overrides",
    [
        {"asset_b": "A"},
        {"asset_a": ""},
        {"fee_numerator": 0},
        {"fee_numerator": 1001},
        {"fee_denominator": 0},
        {"max_total_shares": 0},
        {"swap_count_max": 0},
        {"reward_amount": -1},
        {"ratio_tolerance_bps": 10_001},
        {"fee_numerator": True},
        {"reward_amount": 1.5},
    ],
)
def test_invalid_values_rejected(overrides) -> None:
    params = {"asset_a": "A", "asset_b": "B"}
    params.update(overrides)
    with pytest.raises(ConfigError):
        PoolConfig(**params)


def test_config_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        PoolConfig(asset_a="A", asset_b="A")


def test_from_dict_rejects_unknown_and_missing_keys() -> None:
    with pytest.raises(ConfigError):
        pool_config_from_dict({"asset_a": "A", "asset_b": "B", "fee_bps": 30})
    with pytest.raises(ConfigError):
        pool_config_from_dict({"asset_a": "A"})


def test_dict_roundtrip() -> None:
    c = PoolConfig(asset_a="A", asset_b="B", reward_amount=7, swap_count_max=4)
    assert pool_config_from_dict(pool_config_to_dict(c)) == c


def test_load_yaml(tmp_path) -> None:
    path = tmp_path / "pool.yaml"
    path.write_text(
        "asset_a: USDC\n"
        "asset_b: WETH\n"
        "pool_account: 'pool:usdc-weth'\n"
        "fee_numerator: 9970\n"
        "fee_denominator: 10000\n"
        "reward_amount: 5\n",
        encoding="utf-8",
    )
    c = load_pool_config(path)
    assert (c.asset_a, c.asset_b, c.pool_account) == ("USDC", "WETH", "pool:usdc-weth")
    assert (c.fee_numerator, c.fee_denominator, c.reward_amount) == (9970, 10000, 5)


def test_load_yaml_nested_under_pool_key(tmp_path) -> None:
    path = tmp_path / "pool.yaml"
    path.write_text("pool:\n  asset_a: X\n  asset_b: Y\n", encoding="utf-8")
    c = load_pool_config(str(path))
    assert (c.asset_a, c.asset_b) == ("X", "Y")


def test_load_yaml_rejects_non_mapping(tmp_path) -> None:
    path = tmp_path / "pool.yaml"
    path.write_text("- asset_a\n- asset_b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_pool_config(path)
