#!/usr/bin/env python3
"""
Kagi/WMA trader CLI: backtest | optimize | live
Usage:
  python main.py backtest [--config config.yaml] [--csv data.csv]
  python main.py optimize [--config config.yaml] [--csv data.csv]
  python main.py live [--config config.yaml]
"""

from __future__ import annotations
import argparse
import logging
import queue
import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

import numpy as np

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kagi_trader.analytics.metrics import buy_and_hold
from kagi_trader.backtesting.engine import BacktestSimulator
from kagi_trader.backtesting.optimize import grid_search
from kagi_trader.core.config import Config, load_config
from kagi_trader.core.logger import setup_logging
from kagi_trader.core.types import Candle, KagiMethod, PriceSource
from kagi_trader.data.loader import candles_from_frame, filter_range, load_candles_csv
from kagi_trader.execution.binance_spot import BinanceSpotClient
from kagi_trader.live.engine import LiveEngine
from kagi_trader.live.feed import KlinePoller
from kagi_trader.orders.active_order import ActiveOrder
from kagi_trader.risk.sizing import PositionSizer
from kagi_trader.strategies.kagi_wma import SignalDetector
from kagi_trader.utils.telegram import TelegramNotifier

logger = logging.getLogger("kagi_trader")


def make_client(config: Config) -> BinanceSpotClient:
    return BinanceSpotClient(
        config.binance_api_key,
        config.binance_api_secret,
        testnet=config.use_testnet,
        recv_window=config.recv_window,
    )


def load_history(config: Config, csv_path: Optional[Path]) -> List[Candle]:
    """Candles from CSV when given (argument or backtest.csv_path), else the latest 1000 klines."""
    path = csv_path or config.backtest_csv
    if path:
        return load_candles_csv(path, config.backtest_start, config.backtest_end)
    df = make_client(config).get_klines(config.symbol, config.interval, limit=1000)
    df = filter_range(df, config.backtest_start, config.backtest_end)
    return candles_from_frame(df)


def make_simulator(config: Config) -> BacktestSimulator:
    return BacktestSimulator(
        period=config.period,
        reversal_amount=config.reversal_amount,
        kagi_source=PriceSource.parse(config.kagi_source),
        ma_source=PriceSource.parse(config.ma_source),
        initial_capital=config.backtest_initial_capital,
        fee_pct=config.backtest_fee_pct,
        kagi_method=KagiMethod.parse(config.kagi_method),
    )


def run_backtest(config_path: Path | None, csv_path: Path | None) -> int:
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    candles = load_history(config, csv_path)
    if not candles:
        logger.error("No candles to backtest")
        return 1
    result = make_simulator(config).run(candles)
    s = result.summary
    bench = buy_and_hold(candles, config.backtest_initial_capital, config.backtest_fee_pct)
    print("\n--- Backtest Results ---")
    print(f"Candles: {len(candles)} ({candles[0].time} -> {candles[-1].time})")
    print(f"Total trades: {s.total_trades}")
    print(f"Final capital: {s.final_capital:.2f} (initial {s.initial_capital:.2f})")
    print(f"Total return: {s.total_return_pct:.2f}%  (buy & hold {bench:.2f}%)")
    print(f"Win rate: {s.win_rate:.2f}%")
    print(f"Avg trade size: {s.avg_trade_size:.2f}")
    print(f"Max drawdown: {s.max_drawdown:.2f}")
    return 0


def run_optimize(config_path: Path | None, csv_path: Path | None, top: int) -> int:
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    candles = load_history(config, csv_path)
    if not candles:
        logger.error("No candles to optimize on")
        return 1
    results = grid_search(
        candles,
        reversal_amounts=np.round(np.arange(0.01, 0.21, 0.01), 2).tolist(),
        periods=range(2, 21),
        kagi_source=PriceSource.parse(config.kagi_source),
        ma_source=PriceSource.parse(config.ma_source),
        initial_capital=config.backtest_initial_capital,
        fee_pct=config.backtest_fee_pct,
        kagi_method=KagiMethod.parse(config.kagi_method),
    )
    print(results.head(top).to_string(index=False))
    return 0


def run_live(config_path: Path | None) -> int:
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    if not config.binance_api_key or not config.binance_api_secret:
        logger.error("Missing Binance API key/secret in .env")
        return 1
    client = make_client(config)
    notifier = TelegramNotifier(config.telegram_bot_token, config.telegram_chat_id, prefix=config.symbol)
    engine = LiveEngine(
        client=client,
        strategy=SignalDetector(
            period=config.period,
            reversal_amount=config.reversal_amount,
            kagi_source=PriceSource.parse(config.kagi_source),
            ma_source=PriceSource.parse(config.ma_source),
            kagi_method=KagiMethod.parse(config.kagi_method),
        ),
        symbol=config.symbol,
        base_asset=config.base_asset,
        quote_asset=config.quote_asset,
        sizer=PositionSizer(
            equity_pct=config.equity_pct,
            min_notional=config.min_notional,
            symbol_info=client.get_symbol_info(config.symbol),
        ),
        active_order=ActiveOrder(stale_after=timedelta(minutes=config.stale_order_minutes)),
        notifier=notifier,
        disable_trading=config.disable_trading,
        interval=config.interval,
    )
    engine.reset_active_order()
    if config.equalize_on_start and not config.disable_trading:
        engine.equalize_assets()
    warm = engine.load_recent_candles()

    events: queue.Queue = queue.Queue()
    poller = KlinePoller(
        client, config.symbol, config.interval, events,
        poll_seconds=config.poll_seconds,
        since=warm[-1].time if warm else None,
    )
    notifier.send(f"Kagi trader starting | testnet={config.use_testnet} | trading={not config.disable_trading}")
    poller.start()
    try:
        engine.run(events)
    except KeyboardInterrupt:
        logger.info("Shutdown by user")
    finally:
        poller.stop(timeout=config.poll_seconds + 1)
        engine.reset_active_order()
        notifier.send("Kagi trader stopped.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Kagi/WMA trader CLI")
    parser.add_argument("mode", choices=["backtest", "optimize", "live"], help="Run backtest, optimize or live")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--csv", type=Path, default=None, help="Historical candles CSV (backtest/optimize)")
    parser.add_argument("--top", type=int, default=10, help="Rows of optimize results to print")
    args = parser.parse_args()
    if args.mode == "backtest":
        return run_backtest(args.config, args.csv)
    if args.mode == "optimize":
        return run_optimize(args.config, args.csv, args.top)
    return run_live(args.config)


if __name__ == "__main__":
    exit(main())
