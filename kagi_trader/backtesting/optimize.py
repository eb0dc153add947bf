"""
Parameter grid search over reversal amount and WMA period.
"""

from __future__ import annotations
import itertools
import logging
from typing import Iterable, Sequence

import pandas as pd

from kagi_trader.backtesting.engine import BacktestSimulator
from kagi_trader.core.types import Candle, KagiMethod, PriceSource

logger = logging.getLogger("kagi_trader.backtest.optimize")


def grid_search(
    candles: Sequence[Candle],
    reversal_amounts: Iterable[float],
    periods: Iterable[int],
    kagi_source: PriceSource = PriceSource.CLOSE,
    ma_source: PriceSource = PriceSource.OPEN,
    initial_capital: float = 1000.0,
    fee_pct: float = 0.0,
    kagi_method: KagiMethod = KagiMethod.HIGH_LOW,
) -> pd.DataFrame:
    """
    Backtest every (reversal_amount, period) pair. One row per pair with the
    summary figures, sorted by total_return_pct, best first.
    """
    rows = []
    for reversal, period in itertools.product(list(reversal_amounts), list(periods)):
        sim = BacktestSimulator(
            period=period,
            reversal_amount=reversal,
            kagi_source=kagi_source,
            ma_source=ma_source,
            initial_capital=initial_capital,
            fee_pct=fee_pct,
            kagi_method=kagi_method,
        )
        summary = sim.run(candles).summary
        rows.append({"reversal_amount": reversal, "period": period, **summary.as_dict()})
    logger.info("Grid search: %d combinations", len(rows))
    df = pd.DataFrame(rows, columns=[
        "reversal_amount", "period", "initial_capital", "final_capital", "total_return_pct",
        "total_trades", "win_rate", "avg_trade_size", "max_drawdown",
    ])
    return df.sort_values("total_return_pct", ascending=False, kind="mergesort").reset_index(drop=True)
