"""Unit tests for risk.sizing."""

import pytest
from kagi_trader.core.types import Side
from kagi_trader.risk.sizing import PositionSizer


def test_long_uses_free_quote():
    r = PositionSizer(equity_pct=95.0).size(Side.BUY, price=20.0, free_quote=1000.0, free_base=0.0)
    assert r.allowed is True
    assert r.quantity == 47.5


def test_short_uses_free_base():
    r = PositionSizer(equity_pct=50.0).size(Side.SELL, price=20.0, free_quote=0.0, free_base=3.333)
    assert r.quantity == 1.66


def test_rejects_zero_quantity():
    r = PositionSizer().size(Side.BUY, price=20.0, free_quote=0.1, free_base=0.0)
    assert r.allowed is False
    assert "0" in r.reason


def test_rejects_below_min_notional():
    r = PositionSizer(equity_pct=100.0, min_notional=10.0).size(Side.SELL, 5.0, 0.0, 1.0)
    assert r.allowed is False
    assert "notional" in r.reason


def test_rejects_bad_price():
    assert PositionSizer().size(Side.BUY, 0.0, 100.0, 0.0).allowed is False


def test_lot_step_from_symbol_info():
    sizer = PositionSizer(equity_pct=100.0)
    sizer.update_symbol_info({"filters": [{"filterType": "LOT_SIZE", "minQty": "0.1", "stepSize": "0.1"}]})
    assert sizer.size(Side.SELL, 10.0, 0.0, 2.37).quantity == pytest.approx(2.3)


@pytest.mark.parametrize("pct", [0.0, -5.0, 101.0])
def test_invalid_equity_pct(pct):
    with pytest.raises(ValueError):
        PositionSizer(equity_pct=pct)
