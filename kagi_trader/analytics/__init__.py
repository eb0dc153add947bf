"""Analytics: backtest summary (PnL series, win rate, drawdown) and buy-and-hold benchmark."""

from kagi_trader.analytics.metrics import (
    BacktestSummary,
    summarize,
    round_trips,
    max_drawdown,
    win_rate,
    avg_trade_size,
    buy_and_hold,
)

__all__ = [
    "BacktestSummary",
    "summarize",
    "round_trips",
    "max_drawdown",
    "win_rate",
    "avg_trade_size",
    "buy_and_hold",
]
