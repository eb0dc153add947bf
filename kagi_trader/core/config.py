"""
Configuration: config.yaml sections overlaid by environment variables.

A .env file in the project root is loaded first (python-dotenv); exchange
keys are read from the environment only. Numeric overrides that do not parse
fall back to the YAML value or the default.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]

_TRUTHY = ("true", "1", "yes", "on")


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in _TRUTHY


def _override(env_key: str, fallback: Any, cast: Callable[[Any], Any] = str) -> Any:
    """Environment value cast with `cast`, else fallback (also on a failed cast)."""
    raw = os.getenv(env_key)
    if raw is None or raw.strip() == "":
        return fallback
    try:
        return cast(raw.strip())
    except ValueError:
        return fallback


def _exchange_keys(use_testnet: bool) -> tuple[str, str]:
    """Network specific pair first, then the generic BINANCE_API_KEY/SECRET."""
    network = "TESTNET" if use_testnet else "MAINNET"
    key = os.getenv(f"BINANCE_{network}_API_KEY") or os.getenv("BINANCE_API_KEY", "")
    secret = os.getenv(f"BINANCE_{network}_API_SECRET") or os.getenv("BINANCE_API_SECRET", "")
    return key.strip(), secret.strip()


def read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Build a Config from YAML (default: <root>/config.yaml) and the environment."""
    root = project_root or PROJECT_ROOT
    env_file = root / ".env"
    if env_file.exists():
        load_dotenv(env_file)
    data = read_yaml(config_path or root / "config.yaml")

    def section(name: str) -> Dict[str, Any]:
        return data.get(name) or {}

    api, market, strat = section("api"), section("market"), section("strategy")
    execution, telegram, log_cfg, backtest = (
        section("execution"), section("telegram"), section("logging"), section("backtest")
    )

    use_testnet = _override("USE_TESTNET", _parse_bool(api.get("use_testnet", True)), _parse_bool)
    api_key, api_secret = _exchange_keys(use_testnet)

    return Config(
        binance_api_key=api_key,
        binance_api_secret=api_secret,
        use_testnet=use_testnet,
        symbol=_override("SYMBOL", market.get("symbol", "SOLUSDT")).upper(),
        base_asset=_override("BASE_ASSET", market.get("base_asset", "SOL")).upper(),
        quote_asset=_override("QUOTE_ASSET", market.get("quote_asset", "USDT")).upper(),
        interval=_override("INTERVAL", market.get("interval", "30m")),
        period=_override("WMA_PERIOD", int(strat.get("period", 5)), int),
        reversal_amount=_override("KAGI_REVERSAL", float(strat.get("reversal_amount", 0.03)), float),
        kagi_method=_override("KAGI_METHOD", strat.get("kagi_method", "high_low")),
        kagi_source=_override("KAGI_SOURCE", strat.get("kagi_source", "close")),
        ma_source=_override("MA_SOURCE", strat.get("ma_source", "open")),
        equity_pct=_override("EQUITY_PCT", float(execution.get("equity_pct", 95.0)), float),
        min_notional=_override("MIN_NOTIONAL", float(execution.get("min_notional", 0.001)), float),
        stale_order_minutes=_override(
            "STALE_ORDER_MINUTES", float(execution.get("stale_order_minutes", 10.0)), float
        ),
        disable_trading=_override(
            "DISABLE_TRADING", _parse_bool(execution.get("disable_trading", False)), _parse_bool
        ),
        equalize_on_start=_override(
            "EQUALIZE_ON_START", _parse_bool(execution.get("equalize_on_start", True)), _parse_bool
        ),
        poll_seconds=_override("POLL_SECONDS", float(execution.get("poll_seconds", 5.0)), float),
        recv_window=_override("RECV_WINDOW", int(execution.get("recv_window", 10000)), int),
        telegram_bot_token=_override("TELEGRAM_BOT_TOKEN", telegram.get("bot_token") or ""),
        telegram_chat_id=_override("TELEGRAM_CHAT_ID", str(telegram.get("chat_id") or "")),
        log_level=_override("LOG_LEVEL", log_cfg.get("level", "INFO")),
        log_dir=Path(log_cfg.get("log_dir", "logs")),
        log_file=log_cfg.get("log_file", "kagi_trader.log"),
        backtest_csv=backtest.get("csv_path"),
        backtest_start=backtest.get("start_date"),
        backtest_end=backtest.get("end_date"),
        backtest_initial_capital=float(backtest.get("initial_capital", 1000.0)),
        backtest_fee_pct=float(backtest.get("fee_pct", 0.0)),
    )


class Config:
    """Flat settings object. Unknown field names are rejected."""

    _DEFAULTS: Dict[str, Any] = {
        # api
        "binance_api_key": "",
        "binance_api_secret": "",
        "use_testnet": True,
        # market
        "symbol": "SOLUSDT",
        "base_asset": "SOL",
        "quote_asset": "USDT",
        "interval": "30m",
        # strategy
        "period": 5,
        "reversal_amount": 0.03,
        "kagi_method": "high_low",
        "kagi_source": "close",
        "ma_source": "open",
        # execution
        "equity_pct": 95.0,
        "min_notional": 0.001,
        "stale_order_minutes": 10.0,
        "disable_trading": False,
        "equalize_on_start": True,
        "poll_seconds": 5.0,
        "recv_window": 10000,
        # telegram
        "telegram_bot_token": "",
        "telegram_chat_id": "",
        # logging
        "log_level": "INFO",
        "log_dir": Path("logs"),
        "log_file": "kagi_trader.log",
        # backtest
        "backtest_csv": None,
        "backtest_start": None,
        "backtest_end": None,
        "backtest_initial_capital": 1000.0,
        "backtest_fee_pct": 0.0,
    }
    __slots__ = tuple(_DEFAULTS)

    _SECRETS = ("binance_api_key", "binance_api_secret", "telegram_bot_token")

    def __init__(self, **values: Any):
        unknown = set(values) - set(self._DEFAULTS)
        if unknown:
            raise TypeError(f"Unknown config fields: {sorted(unknown)}")
        for name, default in self._DEFAULTS.items():
            setattr(self, name, values.get(name, default))
        self.log_dir = Path(self.log_dir)

    def __repr__(self) -> str:
        shown = {
            name: ("***" if name in self._SECRETS and getattr(self, name) else getattr(self, name))
            for name in self._DEFAULTS
        }
        return f"Config({shown})"
