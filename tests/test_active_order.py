"""Unit tests for orders.active_order."""

from datetime import datetime, timedelta, timezone

import pytest
from kagi_trader.core.errors import ActiveOrderError, InvalidExchangeEnumError
from kagi_trader.core.types import (
    OrderIntent,
    OrderStatus,
    OrderTag,
    OrderTradeEvent,
    OrderType,
    Side,
    TradeInfo,
    from_unix_ms,
)
from kagi_trader.orders.active_order import ActiveOrder, OrderState, ResetReason

SUBMITTED = 1690000000000
CID = f"{SUBMITTED}-ENTRY"


def _intent(cid: str = CID, tag: OrderTag = OrderTag.ENTRY) -> OrderIntent:
    return OrderIntent(
        symbol="SOLUSDT", client_order_id=cid, tag=tag, side=Side.BUY,
        order_type=OrderType.LIMIT, quantity=1.5, limit_price=25.0, submitted_at=SUBMITTED,
    )


def _event(status: str, cid: str = CID, event_time: int = SUBMITTED + 1000) -> OrderTradeEvent:
    return OrderTradeEvent(
        symbol="SOLUSDT", client_order_id=cid, order_id=42, order_type="LIMIT",
        order_status=status, event_time=event_time, price="25.0", quantity="1.5", side="BUY",
    )


def _at(ms: int) -> datetime:
    return from_unix_ms(ms)


def test_empty_to_pending():
    slot = ActiveOrder()
    assert slot.state == OrderState.EMPTY
    slot.add_entry(_intent())
    assert slot.state == OrderState.PENDING
    assert slot.client_order_id == CID


def test_add_entry_on_occupied_slot_raises():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    with pytest.raises(ActiveOrderError):
        slot.add_entry(_intent(cid=f"{SUBMITTED + 1}-ENTRY"))


def test_add_entry_rejects_non_entry_tag():
    with pytest.raises(ActiveOrderError):
        ActiveOrder().add_entry(_intent(cid=f"{SUBMITTED}-EQUALIZE_BASE", tag=OrderTag.EQUALIZE_BASE))


def test_pending_to_active_on_entry_event():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    assert slot.update_from_event(_event("NEW")) is True
    assert slot.state == OrderState.ACTIVE
    assert slot.entry.status == OrderStatus.NEW
    assert slot.entry.order_id == 42


def test_events_with_other_tags_are_ignored():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    assert slot.update_from_event(_event("FILLED", cid=f"{SUBMITTED}-EQUALIZE_QUOTE")) is False
    assert slot.update_from_event(_event("FILLED", cid="web_abc123")) is False
    assert slot.state == OrderState.PENDING


def test_event_on_empty_slot_is_ignored():
    slot = ActiveOrder()
    assert slot.update_from_event(_event("FILLED")) is False
    assert slot.is_empty


def test_invalid_status_leaves_slot_untouched():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    with pytest.raises(InvalidExchangeEnumError):
        slot.update_from_event(_event("WEIRD"))
    assert slot.state == OrderState.PENDING


def test_filled_resets():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    slot.update_from_event(_event("TRADE"))
    assert slot.entry.status == OrderStatus.FILLED
    assert slot.reconcile(now=_at(SUBMITTED + 2000)) == ResetReason.FILLED
    assert slot.is_empty


@pytest.mark.parametrize("status", ["CANCELED", "REJECTED", "EXPIRED", "EXPIRED_IN_MATCH"])
def test_closed_statuses_reset(status):
    slot = ActiveOrder()
    slot.add_entry(_intent())
    slot.update_from_event(_event(status))
    assert slot.reconcile(now=_at(SUBMITTED + 2000)) == ResetReason.CLOSED
    assert slot.is_empty


def test_pending_goes_stale_after_ten_minutes():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    assert slot.reconcile(now=_at(SUBMITTED + 10 * 60 * 1000)) is None
    assert slot.state == OrderState.PENDING
    assert slot.reconcile(now=_at(SUBMITTED + 10 * 60 * 1000 + 1)) == ResetReason.STALE
    assert slot.is_empty


def test_partially_filled_goes_stale_from_event_time():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    slot.update_from_event(_event("PARTIALLY_FILLED", event_time=SUBMITTED + 60_000))
    assert slot.reconcile(now=_at(SUBMITTED + 11 * 60 * 1000)) is None
    assert slot.reconcile(now=_at(SUBMITTED + 12 * 60 * 1000)) == ResetReason.STALE


def test_pending_cancel_goes_stale():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    slot.update_from_event(_event("PENDING_CANCEL"))
    assert slot.reconcile(now=_at(SUBMITTED + 5 * 60 * 1000)) is None
    assert slot.state == OrderState.ACTIVE
    assert slot.reconcile(now=_at(SUBMITTED + 11 * 60 * 1000 + 1)) == ResetReason.STALE
    assert slot.is_empty


def test_clock_skew_uses_absolute_age():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    assert slot.reconcile(now=_at(SUBMITTED - 11 * 60 * 1000)) == ResetReason.STALE


def test_custom_stale_after():
    slot = ActiveOrder(stale_after=timedelta(seconds=30))
    slot.add_entry(_intent())
    assert slot.reconcile(now=_at(SUBMITTED + 31_000)) == ResetReason.STALE


def test_reconcile_with_exchange_record_promotes_pending():
    slot = ActiveOrder()
    slot.add_entry(_intent())
    fresh = TradeInfo(
        client_order_id=CID, order_id=7, order_type=OrderType.LIMIT, status=OrderStatus.NEW,
        event_time=SUBMITTED + 500, quantity=0.0, price=25.0, side=Side.BUY,
    )
    assert slot.reconcile(now=_at(SUBMITTED + 1000), fresh=fresh) is None
    assert slot.state == OrderState.ACTIVE
    filled = TradeInfo(
        client_order_id=CID, order_id=7, order_type=OrderType.LIMIT, status=OrderStatus.FILLED,
        event_time=SUBMITTED + 900, quantity=1.5, price=25.0, side=Side.BUY,
    )
    assert slot.reconcile(now=_at(SUBMITTED + 1000), fresh=filled) == ResetReason.FILLED


def test_reset_from_any_state():
    slot = ActiveOrder()
    slot.reset()
    assert slot.is_empty
    slot.add_entry(_intent())
    slot.update_from_event(_event("NEW"))
    slot.reset()
    assert slot.state == OrderState.EMPTY
    assert slot.reconcile(now=datetime.now(timezone.utc)) is None
