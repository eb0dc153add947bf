"""
Kagi reversal line, updated one candle at a time.

HIGH_LOW (default): the line follows new extremes in the current direction
and flips to the opposite extreme once the candle travels at least the
reversal amount against it. A candle may extend and reverse in one update.

SOURCE: the same walk on a single price (e.g. close). The reversal check
measures from the line as it was before this candle.
"""

from __future__ import annotations
import logging
from typing import Optional

from kagi_trader.core.types import Candle, KagiDirection, KagiMethod, KagiState, PriceSource

logger = logging.getLogger("kagi_trader.indicators.kagi")


def kagi_step_high_low(state: KagiState, reversal_amount: float, candle: Candle) -> KagiState:
    line = state.line
    if state.direction == KagiDirection.UP:
        if candle.high > line:
            line = candle.high
        if line - candle.low >= reversal_amount:
            return KagiState(KagiDirection.DOWN, candle.low)
        return KagiState(KagiDirection.UP, line)
    if candle.low < line:
        line = candle.low
    if candle.high - line >= reversal_amount:
        return KagiState(KagiDirection.UP, candle.high)
    return KagiState(KagiDirection.DOWN, line)


def kagi_step_source(state: KagiState, reversal_amount: float, price: float) -> KagiState:
    line = state.line
    if state.direction == KagiDirection.UP:
        if state.line - price >= reversal_amount:
            return KagiState(KagiDirection.DOWN, price)
        if price > line:
            line = price
        return KagiState(KagiDirection.UP, line)
    if price - state.line >= reversal_amount:
        return KagiState(KagiDirection.UP, price)
    if price < line:
        line = price
    return KagiState(KagiDirection.DOWN, line)


class KagiTracker:
    """Holds the committed KagiState. update() is pure; commit() stores."""

    def __init__(
        self,
        state: Optional[KagiState] = None,
        method: KagiMethod = KagiMethod.HIGH_LOW,
        source: PriceSource = PriceSource.CLOSE,
    ):
        self.state = state
        self.method = method
        self.source = source

    @property
    def is_seeded(self) -> bool:
        return self.state is not None

    def seed(self, candle: Candle) -> KagiState:
        self.state = KagiState.seed(candle)
        return self.state

    def update(self, reversal_amount: float, candle: Candle) -> KagiState:
        """Next state for this candle. Does not touch self.state."""
        if self.state is None:
            raise RuntimeError("KagiTracker has no state; seed it first")
        if self.method == KagiMethod.SOURCE:
            return kagi_step_source(self.state, reversal_amount, self.source.price(candle))
        return kagi_step_high_low(self.state, reversal_amount, candle)

    def commit(self, state: KagiState) -> None:
        if self.state is not None and state.direction != self.state.direction:
            logger.debug("Kagi reversal %s -> %s at %.6f", self.state.direction.value, state.direction.value, state.line)
        self.state = state

    def advance(self, reversal_amount: float, candle: Candle) -> KagiState:
        state = self.update(reversal_amount, candle)
        self.commit(state)
        return state
