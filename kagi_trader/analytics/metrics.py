"""
Backtest summary over round trips: percent and quote PnL series, win rate,
average trade size, max drawdown. Plus a buy-and-hold benchmark.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np
import pandas as pd

from kagi_trader.core.types import Candle, SignalSide, Trade


def _empty_series() -> pd.Series:
    return pd.Series([], dtype=float, index=pd.DatetimeIndex([], tz="UTC"))


@dataclass
class BacktestSummary:
    """Aggregate backtest statistics. Series are indexed by exit time."""
    initial_capital: float
    final_capital: float
    total_return_pct: float
    total_trades: int
    win_rate: float
    avg_trade_size: float
    max_drawdown: float
    cumulative_pct: pd.Series = field(default_factory=_empty_series)
    cumulative_quote: pd.Series = field(default_factory=_empty_series)
    pct_per_trade: pd.Series = field(default_factory=_empty_series)

    def as_dict(self) -> dict:
        return {
            "initial_capital": self.initial_capital,
            "final_capital": self.final_capital,
            "total_return_pct": self.total_return_pct,
            "total_trades": self.total_trades,
            "win_rate": self.win_rate,
            "avg_trade_size": self.avg_trade_size,
            "max_drawdown": self.max_drawdown,
        }


def round_trips(trades: Sequence[Trade]) -> List[tuple]:
    """Consecutive non-overlapping (entry, exit) pairs; a trailing open entry is dropped."""
    return [(trades[i], trades[i + 1]) for i in range(0, len(trades) - 1, 2)]


def max_drawdown(cumulative_pct: Sequence[float]) -> float:
    """Most negative (value - running max), running max starting at 0. Returns <= 0."""
    if len(cumulative_pct) == 0:
        return 0.0
    arr = np.asarray(cumulative_pct, dtype=float)
    peak = np.maximum.accumulate(np.concatenate(([0.0], arr)))[1:]
    return float(min(0.0, np.min(arr - peak)))


def win_rate(quote_pnls: Sequence[float]) -> float:
    """Percent of round trips with positive quote PnL (0 when none)."""
    if len(quote_pnls) == 0:
        return 0.0
    return sum(1 for p in quote_pnls if p > 0) / len(quote_pnls) * 100.0


def avg_trade_size(trades: Sequence[Trade]) -> float:
    """Mean notional (price * quantity) over all trades (0 when none)."""
    if not trades:
        return 0.0
    return float(np.mean([t.notional for t in trades]))


def summarize(trades: Sequence[Trade], initial_capital: float, fee_pct: float = 0.0) -> BacktestSummary:
    """
    Per round trip: pct = (exit - entry) / entry * factor * 100 (factor +1 for a
    long entry, -1 for short); quote = pct / 100 * entry.price * entry.quantity,
    less |quote| * fee_pct / 100. Quote PnL is applied to capital in order.
    """
    capital = initial_capital
    times, pcts, quotes, cum_quote, cum_pct = [], [], [], [], []
    total_quote = 0.0
    for entry, exit_ in round_trips(trades):
        factor = 1.0 if entry.side == SignalSide.LONG else -1.0
        pct = (exit_.price - entry.price) / entry.price * factor * 100.0
        quote = pct / 100.0 * entry.price * entry.quantity
        quote -= abs(quote) * fee_pct / 100.0
        capital += quote
        total_quote += quote
        times.append(pd.Timestamp(exit_.time))
        pcts.append(pct)
        quotes.append(quote)
        cum_quote.append(total_quote)
        cum_pct.append(total_quote / initial_capital * 100.0 if initial_capital else 0.0)

    if times:
        index = pd.DatetimeIndex(times)
        index = index.tz_localize("UTC") if index.tz is None else index.tz_convert("UTC")
    else:
        index = pd.DatetimeIndex([], tz="UTC")
    return BacktestSummary(
        initial_capital=initial_capital,
        final_capital=capital,
        total_return_pct=(capital - initial_capital) / initial_capital * 100.0 if initial_capital else 0.0,
        total_trades=len(quotes),
        win_rate=win_rate(quotes),
        avg_trade_size=avg_trade_size(list(trades)),
        max_drawdown=max_drawdown(cum_pct),
        cumulative_pct=pd.Series(cum_pct, index=index, dtype=float, name="cumulative_pct"),
        cumulative_quote=pd.Series(cum_quote, index=index, dtype=float, name="cumulative_quote"),
        pct_per_trade=pd.Series(pcts, index=index, dtype=float, name="pct_per_trade"),
    )


def buy_and_hold(candles: Sequence[Candle], capital: float, fee_pct: float = 0.0) -> float:
    """Percent return of buying at the first close and selling at the last, fee charged on both legs."""
    if len(candles) < 2:
        return 0.0
    first, last = candles[0].close, candles[-1].close
    qty = capital * (1 - fee_pct / 100.0) / first
    proceeds = qty * last * (1 - fee_pct / 100.0)
    return (proceeds - capital) / capital * 100.0
