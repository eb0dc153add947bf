"""Unit tests for execution.binance_spot with a mocked python-binance Client."""

from unittest.mock import MagicMock

import pytest
from binance.exceptions import BinanceAPIException
from kagi_trader.core.errors import ExchangeRejectionError
from kagi_trader.core.types import OrderIntent, OrderStatus, OrderTag, OrderType, Side
from kagi_trader.execution.binance_spot import BinanceSpotClient


def _api_error(status: int, code: int, msg: str) -> BinanceAPIException:
    return BinanceAPIException(MagicMock(), status, f'{{"code": {code}, "msg": "{msg}"}}')


def _client():
    raw = MagicMock()
    return BinanceSpotClient("key", "secret", testnet=True, client=raw), raw


def _intent():
    return OrderIntent(
        symbol="SOLUSDT", client_order_id="1690000000000-ENTRY", tag=OrderTag.ENTRY, side=Side.BUY,
        order_type=OrderType.LIMIT, quantity=1.5, limit_price=25.12, submitted_at=1690000000000,
    )


def test_get_klines_frame():
    spot, raw = _client()
    raw.get_klines.return_value = [
        [1690000000000, "10", "11", "9", "10.5", "100", 1690001799999, "0", 5, "0", "0", "0"],
    ]
    df = spot.get_klines("SOLUSDT", "30m", limit=1)
    assert list(df.columns) == ["time", "open", "high", "low", "close", "volume", "close_time"]
    assert df["close"].iloc[0] == 10.5
    assert str(df["time"].dt.tz) == "UTC"


def test_place_limit_order_sends_client_order_id():
    spot, raw = _client()
    raw.create_order.return_value = {"orderId": 99, "clientOrderId": "1690000000000-ENTRY"}
    result = spot.place_limit_order(_intent())
    assert result.success is True
    assert result.order_id == 99
    kwargs = raw.create_order.call_args.kwargs
    assert kwargs["newClientOrderId"] == "1690000000000-ENTRY"
    assert kwargs["side"] == "BUY"
    assert kwargs["type"] == "LIMIT"
    assert kwargs["timeInForce"] == "GTC"


def test_place_limit_order_rejection_raises():
    spot, raw = _client()
    raw.create_order.side_effect = _api_error(400, -2010, "Account has insufficient balance")
    with pytest.raises(ExchangeRejectionError) as exc:
        spot.place_limit_order(_intent())
    assert exc.value.code == -2010


def test_unknown_order_cancel_is_absorbed():
    spot, raw = _client()
    raw.get_open_orders.return_value = [{"orderId": 1}, {"orderId": 2}]
    raw.cancel_order.side_effect = [_api_error(400, -2011, "Unknown order sent."), {"orderId": 2}]
    assert spot.cancel_all_open_orders("SOLUSDT") == [{"orderId": 2}]


def test_cancel_all_with_nothing_open():
    spot, raw = _client()
    raw.get_open_orders.return_value = []
    assert spot.cancel_all_open_orders("SOLUSDT") == []
    raw.cancel_order.assert_not_called()


def test_fetch_order_parses_record_and_absorbs_unknown():
    spot, raw = _client()
    raw.get_order.return_value = {
        "clientOrderId": "1690000000000-ENTRY", "orderId": 99, "type": "LIMIT", "status": "PARTIALLY_FILLED",
        "updateTime": 1690000005000, "executedQty": "0.5", "price": "25.12", "side": "BUY",
    }
    info = spot.fetch_order("SOLUSDT", "1690000000000-ENTRY")
    assert info.status == OrderStatus.PARTIALLY_FILLED
    assert info.event_time == 1690000005000
    raw.get_order.side_effect = _api_error(400, -2013, "Order does not exist.")
    assert spot.fetch_order("SOLUSDT", "1690000000000-ENTRY") is None


def test_rate_limit_retried(monkeypatch):
    monkeypatch.setattr("kagi_trader.execution.binance_spot.time.sleep", lambda s: None)
    spot, raw = _client()
    raw.get_symbol_ticker.side_effect = [_api_error(429, -1003, "Too many requests."), {"price": "25.5"}]
    assert spot.get_price("SOLUSDT") == 25.5
    assert raw.get_symbol_ticker.call_count == 2


def test_balances():
    spot, raw = _client()
    raw.get_account.return_value = {"balances": [
        {"asset": "SOL", "free": "3.5", "locked": "0.5"},
        {"asset": "USDT", "free": "100", "locked": "0"},
    ]}
    balances = spot.fetch_account_balances()
    assert balances["SOL"].free == 3.5
    assert balances["SOL"].locked == 0.5
    assert balances["USDT"].free == 100.0
