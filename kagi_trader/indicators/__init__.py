"""Indicators: rolling candle window, Kagi line, weighted moving average."""

from kagi_trader.indicators.candle_window import CandleWindow
from kagi_trader.indicators.kagi import KagiTracker, kagi_step_high_low, kagi_step_source
from kagi_trader.indicators.wma import wma, wma_weights

__all__ = [
    "CandleWindow",
    "KagiTracker",
    "kagi_step_high_low",
    "kagi_step_source",
    "wma",
    "wma_weights",
]
