from __future__ import annotations

import importlib.util
from pathlib import Path
from typing import Any


def _load_demo() -> Any:
    path = Path(__file__).resolve().parents[2] / "tools" / "amm_swap_demo.py"
    spec = importlib.util.spec_from_file_location("tools.amm_swap_demo", path)
    assert spec and spec.loader, f"could not load spec from {path}"
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_demo_runs_and_pays_reward(capsys) -> None:
    demo = _load_demo()
    assert demo.main(["--swaps", "10"]) == 0
    out = capsys.readouterr().out
    assert "[amm-demo] seeded reserves=(100000, 100000)" in out
    assert "rewards_paid=5" in out


def test_demo_reads_yaml_config(tmp_path, capsys) -> None:
    cfg = tmp_path / "pool.yaml"
    cfg.write_text("asset_a: X\nasset_b: Y\nswap_count_max: 2\nreward_amount: 3\n", encoding="utf-8")
    demo = _load_demo()
    assert demo.main(["--config", str(cfg), "--swaps", "4"]) == 0
    assert "rewards_paid=6" in capsys.readouterr().out


def test_demo_reports_bad_config(tmp_path, capsys) -> None:
    cfg = tmp_path / "pool.yaml"
    cfg.write_text("asset_a: X\n", encoding="utf-8")
    assert _load_demo().main(["--config", str(cfg)]) == 2
    assert "FAIL (config)" in capsys.readouterr().out


def test_demo_reports_malformed_yaml(tmp_path, capsys) -> None:
    cfg = tmp_path / "pool.yaml"
    cfg.write_text("asset_a: [X\nasset_b: Y\n", encoding="utf-8")
    assert _load_demo().main(["--config", str(cfg)]) == 2
    assert "FAIL (config)" in capsys.readouterr().out
