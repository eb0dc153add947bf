"""Fixed-capacity rolling window of candles, newest first."""

from __future__ import annotations
from collections import deque
from typing import Iterator, List

from kagi_trader.core.types import Candle


class CandleWindow:
    """
    Index 0 is the most recently pushed candle. Once full, each push evicts
    the oldest entry (insertion order, not price).
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._candles: deque[Candle] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return len(self._candles) == self._capacity

    def push(self, candle: Candle) -> None:
        # deque(maxlen) drops from the right when appending left
        self._candles.appendleft(candle)

    def __len__(self) -> int:
        return len(self._candles)

    def __getitem__(self, index: int) -> Candle:
        return self._candles[index]

    def __iter__(self) -> Iterator[Candle]:
        return iter(self._candles)

    @property
    def newest(self) -> Candle:
        return self._candles[0]

    @property
    def oldest(self) -> Candle:
        return self._candles[-1]

    def to_list(self) -> List[Candle]:
        return list(self._candles)

    def __repr__(self) -> str:
        return f"CandleWindow(len={len(self)}, capacity={self._capacity})"
