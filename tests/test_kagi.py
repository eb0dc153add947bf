"""Unit tests for indicators.kagi."""

from datetime import datetime, timezone

import pytest
from kagi_trader.core.types import Candle, KagiDirection, KagiMethod, KagiState, PriceSource
from kagi_trader.indicators.kagi import KagiTracker, kagi_step_high_low, kagi_step_source

T0 = datetime(2023, 7, 22, tzinfo=timezone.utc)


def _candle(high: float, low: float, close: float = 0.0) -> Candle:
    return Candle(time=T0, open=low, high=high, low=low, close=close or low)


def test_worked_example_extend_then_reverse():
    state = KagiState(KagiDirection.DOWN, 10.0)
    a = kagi_step_high_low(state, 1.0, _candle(10.5, 9.8))
    assert a == KagiState(KagiDirection.DOWN, 9.8)
    b = kagi_step_high_low(a, 1.0, _candle(11.0, 9.5))
    assert b == KagiState(KagiDirection.UP, 11.0)


def test_up_reversal_to_low():
    state = KagiState(KagiDirection.UP, 20.0)
    assert kagi_step_high_low(state, 1.0, _candle(20.5, 19.8)) == KagiState(KagiDirection.UP, 20.5)
    assert kagi_step_high_low(state, 1.0, _candle(20.2, 18.9)) == KagiState(KagiDirection.DOWN, 18.9)


def test_reversal_threshold_is_inclusive():
    state = KagiState(KagiDirection.DOWN, 10.0)
    assert kagi_step_high_low(state, 1.0, _candle(11.0, 10.0)).direction == KagiDirection.UP


def test_source_method_measures_from_previous_line():
    state = KagiState(KagiDirection.UP, 10.0)
    assert kagi_step_source(state, 1.0, 10.4) == KagiState(KagiDirection.UP, 10.4)
    assert kagi_step_source(state, 1.0, 9.5) == KagiState(KagiDirection.UP, 10.0)
    assert kagi_step_source(state, 1.0, 9.0) == KagiState(KagiDirection.DOWN, 9.0)


def test_tracker_update_is_pure_and_advance_commits():
    tracker = KagiTracker(KagiState(KagiDirection.DOWN, 10.0))
    nxt = tracker.update(1.0, _candle(11.0, 9.5))
    assert tracker.state == KagiState(KagiDirection.DOWN, 10.0)
    assert tracker.advance(1.0, _candle(11.0, 9.5)) == nxt
    assert tracker.state == nxt


def test_tracker_seed_and_unseeded_update():
    tracker = KagiTracker(method=KagiMethod.SOURCE, source=PriceSource.CLOSE)
    with pytest.raises(RuntimeError):
        tracker.update(1.0, _candle(1.0, 1.0))
    tracker.seed(_candle(12.0, 11.0))
    assert tracker.state == KagiState(KagiDirection.DOWN, 11.0)
    assert tracker.advance(0.5, _candle(12.0, 11.0, close=11.6)) == KagiState(KagiDirection.UP, 11.6)


def test_zero_reversal_flips_every_candle():
    up = KagiState(KagiDirection.UP, 20.0)
    assert kagi_step_high_low(up, 0.0, _candle(20.5, 19.8)) == KagiState(KagiDirection.DOWN, 19.8)
    down = KagiState(KagiDirection.DOWN, 10.0)
    assert kagi_step_high_low(down, 0.0, _candle(10.3, 9.6)) == KagiState(KagiDirection.UP, 10.3)

    tracker = KagiTracker(KagiState(KagiDirection.DOWN, 10.0))
    highs_lows = [(10.4, 9.9), (10.6, 10.1), (10.2, 9.7), (10.8, 10.0)]
    directions = [tracker.advance(0.0, _candle(h, l)).direction for h, l in highs_lows]
    assert directions == [KagiDirection.UP, KagiDirection.DOWN, KagiDirection.UP, KagiDirection.DOWN]
    assert tracker.state == KagiState(KagiDirection.DOWN, 10.0)
