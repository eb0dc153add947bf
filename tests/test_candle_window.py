"""Unit tests for indicators.candle_window."""

from datetime import datetime, timedelta, timezone

import pytest
from kagi_trader.core.types import Candle
from kagi_trader.indicators.candle_window import CandleWindow

T0 = datetime(2023, 7, 22, tzinfo=timezone.utc)


def _candle(i: int) -> Candle:
    p = 100.0 + i
    return Candle(time=T0 + timedelta(minutes=30 * i), open=p, high=p + 1, low=p - 1, close=p)


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        CandleWindow(0)


def test_newest_first_and_eviction():
    w = CandleWindow(3)
    for i in range(5):
        w.push(_candle(i))
        assert len(w) == min(i + 1, 3)
        assert w[0] == _candle(i)
    assert w.is_full
    assert [c.open for c in w] == [104.0, 103.0, 102.0]
    assert w.newest == _candle(4)
    assert w.oldest == _candle(2)


def test_partial_window():
    w = CandleWindow(4)
    w.push(_candle(0))
    w.push(_candle(1))
    assert not w.is_full
    assert w.to_list() == [_candle(1), _candle(0)]
