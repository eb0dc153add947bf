"""
Weighted moving average over a newest-first slice of candles.

For a slice of length L the candle at index i (0 = newest) gets weight
(L - i) * L, so recent bars dominate.
"""

from __future__ import annotations
from typing import Sequence

import numpy as np

from kagi_trader.core.types import Candle, PriceSource


def wma_weights(length: int) -> np.ndarray:
    return np.arange(length, 0, -1, dtype=float) * length


def wma(candles: Sequence[Candle], source: PriceSource = PriceSource.OPEN) -> float:
    """Weighted average of source prices. Raises ValueError for an empty slice."""
    if len(candles) == 0:
        raise ValueError("wma of an empty slice is undefined")
    prices = np.fromiter((source.price(c) for c in candles), dtype=float, count=len(candles))
    weights = wma_weights(len(prices))
    # centered on the newest price: a flat slice returns that price exactly
    ref = prices[0]
    return float(ref + np.dot(weights, prices - ref) / weights.sum())
