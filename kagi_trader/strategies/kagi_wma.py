"""
Kagi / WMA crossover.
Long when the WMA moves from at-or-below the Kagi line to strictly above it
between the previous and the current bar; short on the mirror crossing.
"""

from __future__ import annotations
import logging
from typing import Optional

from kagi_trader.core.errors import AmbiguousSignalError
from kagi_trader.core.types import Candle, KagiMethod, KagiState, PriceSource, Signal
from kagi_trader.indicators.candle_window import CandleWindow
from kagi_trader.indicators.kagi import KagiTracker
from kagi_trader.indicators.wma import wma
from kagi_trader.strategies.base import BaseStrategy

logger = logging.getLogger("kagi_trader.strategies.kagi_wma")


class SignalDetector(BaseStrategy):
    """
    Owns a CandleWindow of period + 1 candles and a KagiTracker.
    The current WMA uses the newest `period` candles, the previous WMA the
    oldest `period`, so both are available once the window is full.
    """

    def __init__(
        self,
        period: int = 5,
        reversal_amount: float = 0.03,
        kagi_source: PriceSource = PriceSource.CLOSE,
        ma_source: PriceSource = PriceSource.OPEN,
        kagi_method: KagiMethod = KagiMethod.HIGH_LOW,
        kagi_state: Optional[KagiState] = None,
    ):
        if period < 1:
            raise ValueError(f"period must be >= 1, got {period}")
        self.period = period
        self.reversal_amount = reversal_amount
        self.kagi_source = kagi_source
        self.ma_source = ma_source
        self.window = CandleWindow(period + 1)
        self.tracker = KagiTracker(kagi_state, method=kagi_method, source=kagi_source)
        self.last_wma: Optional[float] = None

    @property
    def warmup_candles(self) -> int:
        return max(self.window.capacity, 3)

    @property
    def kagi(self) -> Optional[KagiState]:
        return self.tracker.state

    def push(self, candle: Candle) -> None:
        if not self.tracker.is_seeded:
            self.tracker.seed(candle)
        self.window.push(candle)

    def evaluate(self) -> Signal:
        """
        Signal for the newest candle in the window. Commits the Kagi update
        before checking for an ambiguous result. Raises AmbiguousSignalError.
        """
        window = self.window
        if len(window) < 3:
            logger.debug("Insufficient candles for Kagi (%d)", len(window))
            return Signal.none()
        if len(window) < window.capacity:
            logger.debug("Insufficient candles for WMA (%d/%d)", len(window), window.capacity)
            return Signal.none()

        c0 = window.newest
        k1 = self.tracker.state
        k0 = self.tracker.advance(self.reversal_amount, c0)

        candles = window.to_list()
        wma0 = wma(candles[:-1], self.ma_source)
        wma1 = wma(candles[1:], self.ma_source)
        self.last_wma = wma0
        logger.debug("kagi=%s %.6f wma=%.6f", k0.direction.value, k0.line, wma0)

        long = wma0 > k0.line and not wma1 > k1.line
        short = wma0 < k0.line and not wma1 < k1.line
        if long and short:
            raise AmbiguousSignalError(wma0, k0.line)
        if long:
            return Signal.long(c0.close, c0.time)
        if short:
            return Signal.short(c0.close, c0.time)
        return Signal.none()

    def process_candle(self, candle: Candle) -> Signal:
        self.push(candle)
        try:
            signal = self.evaluate()
        except AmbiguousSignalError as e:
            logger.error("Ambiguous signal at %s, treating as none: %s", candle.time, e)
            return Signal.none()
        if not signal.is_none:
            logger.info(signal.describe())
        return signal
