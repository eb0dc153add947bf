"""Data: historical candle loading."""

from kagi_trader.data.loader import load_candles_csv, candles_from_frame, filter_range

__all__ = ["load_candles_csv", "candles_from_frame", "filter_range"]
