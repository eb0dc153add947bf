"""ActiveOrder: the single entry-order slot kept per traded symbol.

States:
    EMPTY   : no order in flight
    PENDING : entry submitted, no execution report yet
    ACTIVE  : execution report received (status NEW / PARTIALLY_FILLED / FILLED / ...)

Transitions:
    EMPTY          -> PENDING  (add_entry)
    PENDING|ACTIVE -> ACTIVE   (update_from_event with the entry tag)
    ACTIVE FILLED  -> EMPTY    (reconcile, reason FILLED)
    PENDING, ACTIVE NEW|PARTIALLY_FILLED|PENDING_CANCEL older than stale_after -> EMPTY (reconcile, reason STALE)
    ACTIVE CANCELED|REJECTED|EXPIRED -> EMPTY (reconcile, reason CLOSED)
    ANY            -> EMPTY    (reset)

The slot never talks to the exchange. Callers cancel open orders whenever
reconcile() returns a reason.
"""

from __future__ import annotations
import dataclasses
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from kagi_trader.core.errors import ActiveOrderError
from kagi_trader.core.types import OrderIntent, OrderStatus, OrderTag, OrderTradeEvent, TradeInfo, to_unix_ms
from kagi_trader.utils.client_order_id import parse_order_tag

logger = logging.getLogger("kagi_trader.orders")

DEFAULT_STALE_AFTER = timedelta(minutes=10)


class OrderState(Enum):
    EMPTY = "EMPTY"
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"


class ResetReason(str, Enum):
    FILLED = "filled"
    STALE = "stale"
    CLOSED = "closed"


class ActiveOrder:
    """Tracks at most one entry order. entry is an OrderIntent (pending) or TradeInfo (active)."""

    def __init__(self, stale_after: timedelta = DEFAULT_STALE_AFTER, entry_tag: OrderTag = OrderTag.ENTRY):
        self.stale_after = stale_after
        self.entry_tag = entry_tag
        self.entry: Optional[Union[OrderIntent, TradeInfo]] = None

    # --- read ---

    @property
    def state(self) -> OrderState:
        if self.entry is None:
            return OrderState.EMPTY
        if isinstance(self.entry, OrderIntent):
            return OrderState.PENDING
        return OrderState.ACTIVE

    @property
    def is_empty(self) -> bool:
        return self.entry is None

    @property
    def client_order_id(self) -> Optional[str]:
        return None if self.entry is None else self.entry.client_order_id

    def recorded_at(self) -> Optional[int]:
        """Submission time (pending) or last event time (active), UNIX ms."""
        if isinstance(self.entry, OrderIntent):
            return self.entry.submitted_at
        if isinstance(self.entry, TradeInfo):
            return self.entry.event_time
        return None

    def age(self, now: datetime) -> Optional[timedelta]:
        recorded = self.recorded_at()
        if recorded is None:
            return None
        # abs() keeps clock skew from producing a negative age
        return timedelta(milliseconds=abs(to_unix_ms(now) - recorded))

    # --- transitions ---

    def add_entry(self, intent: OrderIntent) -> None:
        if self.entry is not None:
            raise ActiveOrderError(f"entry slot occupied by {self.client_order_id}")
        if intent.tag != self.entry_tag:
            raise ActiveOrderError(f"expected {self.entry_tag.value} order, got {intent.tag.value}")
        self.entry = intent
        logger.info("Entry pending: %s %s %s @ %s", intent.client_order_id, intent.side.value,
                    intent.quantity, intent.limit_price)

    def update_from_event(self, event: OrderTradeEvent) -> bool:
        """
        Apply an execution report. Returns True when the slot changed.
        Raises InvalidExchangeEnumError (slot untouched) on unparseable fields.
        """
        tag = parse_order_tag(event.client_order_id)
        if tag != self.entry_tag:
            logger.debug("Ignoring order event %s (tag %s)", event.client_order_id, tag)
            return False
        if self.entry is None:
            logger.debug("Ignoring order event %s, no entry in flight", event.client_order_id)
            return False
        info = TradeInfo.from_event(event)
        if info.client_order_id != self.entry.client_order_id:
            logger.warning("Entry event %s does not match tracked %s", info.client_order_id,
                           self.entry.client_order_id)
        self.entry = info
        logger.info("Entry %s: %s %s @ %s", info.status.value, info.side.value, info.quantity, info.price)
        return True

    def reconcile(self, now: Optional[datetime] = None, fresh: Optional[TradeInfo] = None) -> Optional[ResetReason]:
        """
        Sync against a freshly fetched order record, then reset the slot if the
        order is filled, closed, or stale. Returns the reason for the reset.
        """
        now = now or datetime.now(timezone.utc)
        if fresh is not None and self.entry is not None:
            if isinstance(self.entry, OrderIntent):
                # no execution report seen yet; the exchange record stands in for it
                logger.info("Entry %s known to exchange as %s", fresh.client_order_id, fresh.status.value)
                self.entry = fresh
            elif fresh.status != self.entry.status:
                logger.info("Entry status %s -> %s (exchange)", self.entry.status.value, fresh.status.value)
                self.entry = dataclasses.replace(self.entry, status=fresh.status)

        reason = self._reset_reason(now)
        if reason is not None:
            logger.info("Resetting entry %s: %s", self.client_order_id, reason.value)
            self.reset()
        return reason

    def _reset_reason(self, now: datetime) -> Optional[ResetReason]:
        entry = self.entry
        if entry is None:
            return None
        if isinstance(entry, TradeInfo):
            if entry.status == OrderStatus.FILLED:
                return ResetReason.FILLED
            if entry.status.is_closed:
                return ResetReason.CLOSED
            # PENDING_CANCEL ages out like a working order
            if not (entry.status.is_working or entry.status == OrderStatus.PENDING_CANCEL):
                return None
        if self.age(now) > self.stale_after:
            return ResetReason.STALE
        return None

    def reset(self) -> None:
        self.entry = None

    def __repr__(self) -> str:
        return f"ActiveOrder(state={self.state.value}, entry={self.client_order_id})"
