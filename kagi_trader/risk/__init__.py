"""Risk: position sizing."""

from kagi_trader.risk.sizing import PositionSizer, SizingResult

__all__ = ["PositionSizer", "SizingResult"]
