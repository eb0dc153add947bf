"""
Backtest simulator: closed candles in order, one long position at a time,
entries and exits filled at the signal candle's close.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from kagi_trader.analytics.metrics import BacktestSummary, summarize
from kagi_trader.core.types import Candle, KagiMethod, PriceSource, Signal, SignalSide, Trade
from kagi_trader.strategies.kagi_wma import SignalDetector

logger = logging.getLogger("kagi_trader.backtest")


@dataclass
class BacktestResult:
    """Backtest output: trades, summary, non-none signals and per-candle indicator values."""
    trades: List[Trade] = field(default_factory=list)
    summary: Optional[BacktestSummary] = None
    signals: List[Signal] = field(default_factory=list)
    indicators: pd.DataFrame = field(
        default_factory=lambda: pd.DataFrame(columns=["time", "close", "kagi", "wma"])
    )


class BacktestSimulator:
    """
    Runs a fresh SignalDetector over a finite candle series.
    Long while flat opens capital / price units; short while long closes the
    position and sets capital = qty * price less the fee on |PnL| (the same
    charge summarize() applies); short while flat does nothing.
    """

    def __init__(
        self,
        period: int = 5,
        reversal_amount: float = 0.03,
        kagi_source: PriceSource = PriceSource.CLOSE,
        ma_source: PriceSource = PriceSource.OPEN,
        initial_capital: float = 1000.0,
        fee_pct: float = 0.0,
        kagi_method: KagiMethod = KagiMethod.HIGH_LOW,
    ):
        self.period = period
        self.reversal_amount = reversal_amount
        self.kagi_source = kagi_source
        self.ma_source = ma_source
        self.initial_capital = initial_capital
        self.fee_pct = fee_pct
        self.kagi_method = kagi_method

    def make_detector(self) -> SignalDetector:
        return SignalDetector(
            period=self.period,
            reversal_amount=self.reversal_amount,
            kagi_source=self.kagi_source,
            ma_source=self.ma_source,
            kagi_method=self.kagi_method,
        )

    def run(self, candles: Sequence[Candle]) -> BacktestResult:
        detector = self.make_detector()
        capital = self.initial_capital
        position: Optional[Trade] = None
        trades: List[Trade] = []
        signals: List[Signal] = []
        rows = []

        for candle in candles:
            signal = detector.process_candle(candle)
            kagi = detector.kagi
            rows.append({
                "time": candle.time,
                "close": candle.close,
                "kagi": kagi.line if kagi is not None else np.nan,
                "wma": detector.last_wma if detector.last_wma is not None else np.nan,
            })
            if signal.is_none:
                continue
            signals.append(signal)

            if signal.is_long and position is None:
                position = Trade(
                    time=candle.time,
                    side=SignalSide.LONG,
                    quantity=capital / signal.price,
                    price=signal.price,
                    capital=capital,
                )
                trades.append(position)
                logger.debug("Open long %.6f @ %.6f", position.quantity, position.price)
            elif signal.is_short and position is not None:
                proceeds = position.quantity * signal.price
                capital = proceeds - abs(proceeds - position.capital) * self.fee_pct / 100.0
                trades.append(Trade(
                    time=candle.time,
                    side=SignalSide.SHORT,
                    quantity=position.quantity,
                    price=signal.price,
                    capital=capital,
                ))
                logger.debug("Close long @ %.6f, capital=%.4f", signal.price, capital)
                position = None

        summary = summarize(trades, self.initial_capital, self.fee_pct)
        logger.info(
            "Backtest done: %d candles, %d trades, return %.2f%%, win rate %.2f%%, max DD %.2f",
            len(candles), summary.total_trades, summary.total_return_pct,
            summary.win_rate, summary.max_drawdown,
        )
        indicators = pd.DataFrame(rows, columns=["time", "close", "kagi", "wma"])
        return BacktestResult(trades=trades, summary=summary, signals=signals, indicators=indicators)
