"""Abstract strategy: consumes closed candles, emits signals."""

from __future__ import annotations
from abc import ABC, abstractmethod

from kagi_trader.core.types import Candle, Signal


class BaseStrategy(ABC):
    """A strategy sees each closed candle exactly once, in feed order."""

    @abstractmethod
    def process_candle(self, candle: Candle) -> Signal:
        """Ingest a closed candle and return the signal for it (Signal.none() if nothing)."""
        pass

    @property
    @abstractmethod
    def warmup_candles(self) -> int:
        """Closed candles needed before the first signal can fire."""
        pass
