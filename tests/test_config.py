"""Unit tests for core.config."""

import pytest
from kagi_trader.core.config import load_config

ENV_KEYS = [
    "USE_TESTNET", "BINANCE_API_KEY", "BINANCE_API_SECRET",
    "BINANCE_TESTNET_API_KEY", "BINANCE_TESTNET_API_SECRET",
    "BINANCE_MAINNET_API_KEY", "BINANCE_MAINNET_API_SECRET",
    "SYMBOL", "WMA_PERIOD", "KAGI_REVERSAL", "KAGI_METHOD", "DISABLE_TRADING", "STALE_ORDER_MINUTES",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_defaults_without_files(tmp_path):
    cfg = load_config(tmp_path / "missing.yaml", tmp_path)
    assert cfg.symbol == "SOLUSDT"
    assert cfg.period == 5
    assert cfg.reversal_amount == 0.03
    assert cfg.kagi_method == "high_low"
    assert cfg.stale_order_minutes == 10.0
    assert cfg.use_testnet is True
    assert cfg.binance_api_key == ""


def test_yaml_and_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(
        "market:\n  symbol: btcusdt\n  interval: 1h\n"
        "strategy:\n  period: 8\n  reversal_amount: 0.5\n"
        "backtest:\n  fee_pct: 0.1\n"
    )
    monkeypatch.setenv("WMA_PERIOD", "13")
    monkeypatch.setenv("DISABLE_TRADING", "true")
    cfg = load_config(path, tmp_path)
    assert cfg.symbol == "BTCUSDT"
    assert cfg.interval == "1h"
    assert cfg.period == 13
    assert cfg.reversal_amount == 0.5
    assert cfg.disable_trading is True
    assert cfg.backtest_fee_pct == 0.1


def test_malformed_numeric_env_falls_back(tmp_path, monkeypatch):
    monkeypatch.setenv("KAGI_REVERSAL", "lots")
    monkeypatch.setenv("WMA_PERIOD", "7.5")
    cfg = load_config(None, tmp_path)
    assert cfg.reversal_amount == 0.03
    assert cfg.period == 5


def test_keys_follow_network(tmp_path, monkeypatch):
    monkeypatch.setenv("BINANCE_TESTNET_API_KEY", "tk")
    monkeypatch.setenv("BINANCE_TESTNET_API_SECRET", "ts")
    monkeypatch.setenv("BINANCE_API_KEY", "generic")
    monkeypatch.setenv("BINANCE_API_SECRET", "generic-secret")
    assert load_config(None, tmp_path).binance_api_key == "tk"
    monkeypatch.setenv("USE_TESTNET", "false")
    cfg = load_config(None, tmp_path)
    assert cfg.use_testnet is False
    assert cfg.binance_api_key == "generic"


def test_env_file_loaded_from_project_root(tmp_path):
    (tmp_path / ".env").write_text("SYMBOL=ethusdt\n")
    assert load_config(None, tmp_path).symbol == "ETHUSDT"
