"""
Core data types: candles, signals, Kagi state, exchange enums, orders and trades.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from kagi_trader.core.errors import InvalidExchangeEnumError


def to_unix_ms(ts: datetime) -> int:
    """Datetime to UNIX milliseconds. Naive datetimes are taken as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return int(round(ts.timestamp() * 1000))


def from_unix_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)


@dataclass(frozen=True)
class Candle:
    """OHLC bar, optional volume."""
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None


class PriceSource(str, Enum):
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"

    def price(self, candle: Candle) -> float:
        return getattr(candle, self.value)

    @classmethod
    def parse(cls, value: str) -> "PriceSource":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported price source: {value}") from None


class KagiDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class KagiMethod(str, Enum):
    """HIGH_LOW extends and reverses on candle extremes; SOURCE uses one price."""
    HIGH_LOW = "high_low"
    SOURCE = "source"

    @classmethod
    def parse(cls, value: str) -> "KagiMethod":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported Kagi method: {value}") from None


@dataclass(frozen=True)
class KagiState:
    direction: KagiDirection
    line: float

    @classmethod
    def seed(cls, candle: Candle) -> "KagiState":
        """Initial state from the first candle: its low, pointing down."""
        return cls(direction=KagiDirection.DOWN, line=candle.low)


class SignalSide(str, Enum):
    LONG = "BUY"
    SHORT = "SELL"
    NONE = "NONE"


@dataclass(frozen=True)
class Signal:
    """Long/short entry at price and time, or no signal."""
    side: SignalSide
    price: float = 0.0
    timestamp: Optional[datetime] = None

    @classmethod
    def long(cls, price: float, timestamp: datetime) -> "Signal":
        return cls(SignalSide.LONG, price, timestamp)

    @classmethod
    def short(cls, price: float, timestamp: datetime) -> "Signal":
        return cls(SignalSide.SHORT, price, timestamp)

    @classmethod
    def none(cls) -> "Signal":
        return cls(SignalSide.NONE)

    @property
    def is_long(self) -> bool:
        return self.side == SignalSide.LONG

    @property
    def is_short(self) -> bool:
        return self.side == SignalSide.SHORT

    @property
    def is_none(self) -> bool:
        return self.side == SignalSide.NONE

    def describe(self) -> str:
        if self.is_none:
            return "No signal"
        label = "Long" if self.is_long else "Short"
        return f"{label} @ {self.price} ({self.timestamp})"


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, value: str) -> "Side":
        v = str(value).strip().upper()
        if v in ("BUY", "LONG"):
            return cls.BUY
        if v in ("SELL", "SHORT"):
            return cls.SELL
        raise InvalidExchangeEnumError("side", value)


class OrderType(str, Enum):
    LIMIT = "LIMIT"
    MARKET = "MARKET"
    STOP_LOSS = "STOP_LOSS"
    STOP_LOSS_LIMIT = "STOP_LOSS_LIMIT"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_LIMIT = "TAKE_PROFIT_LIMIT"
    LIMIT_MAKER = "LIMIT_MAKER"

    @classmethod
    def parse(cls, value: str) -> "OrderType":
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidExchangeEnumError("order type", value) from None


class OrderStatus(str, Enum):
    NEW = "NEW"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELED = "CANCELED"
    PENDING_CANCEL = "PENDING_CANCEL"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    EXPIRED_IN_MATCH = "EXPIRED_IN_MATCH"

    @classmethod
    def parse(cls, value: str) -> "OrderStatus":
        v = str(value).strip().upper()
        # execution reports use TRADE for fills
        if v == "TRADE":
            return cls.FILLED
        try:
            return cls(v)
        except ValueError:
            raise InvalidExchangeEnumError("order status", value) from None

    @property
    def is_working(self) -> bool:
        return self in (OrderStatus.NEW, OrderStatus.PARTIALLY_FILLED)

    @property
    def is_closed(self) -> bool:
        return self in (
            OrderStatus.CANCELED,
            OrderStatus.REJECTED,
            OrderStatus.EXPIRED,
            OrderStatus.EXPIRED_IN_MATCH,
        )


class OrderTag(str, Enum):
    """Logical role of an order, carried inside its client order id."""
    ENTRY = "ENTRY"
    EQUALIZE_QUOTE = "EQUALIZE_QUOTE"
    EQUALIZE_BASE = "EQUALIZE_BASE"


@dataclass(frozen=True)
class OrderIntent:
    """Order about to be submitted. submitted_at is UNIX ms."""
    symbol: str
    client_order_id: str
    tag: OrderTag
    side: Side
    order_type: OrderType
    quantity: float
    limit_price: Optional[float]
    submitted_at: int


@dataclass(frozen=True)
class OrderTradeEvent:
    """Execution report as received from the exchange (strings untouched)."""
    symbol: str
    client_order_id: str
    order_id: int
    order_type: str
    order_status: str
    event_time: int
    price: str
    quantity: str
    side: str


@dataclass(frozen=True)
class TradeInfo:
    """Confirmed order state, parsed from an event or an order record."""
    client_order_id: str
    order_id: int
    order_type: OrderType
    status: OrderStatus
    event_time: int
    quantity: float
    price: float
    side: Side

    @classmethod
    def from_event(cls, event: OrderTradeEvent) -> "TradeInfo":
        return cls(
            client_order_id=event.client_order_id,
            order_id=int(event.order_id),
            order_type=OrderType.parse(event.order_type),
            status=OrderStatus.parse(event.order_status),
            event_time=int(event.event_time),
            quantity=float(event.quantity),
            price=float(event.price),
            side=Side.parse(event.side),
        )

    @classmethod
    def from_order_record(cls, record: dict) -> "TradeInfo":
        """From a REST order record (GET /api/v3/order)."""
        return cls(
            client_order_id=record["clientOrderId"],
            order_id=int(record["orderId"]),
            order_type=OrderType.parse(record["type"]),
            status=OrderStatus.parse(record["status"]),
            event_time=int(record.get("updateTime") or record.get("time") or 0),
            quantity=float(record.get("executedQty", 0.0)),
            price=float(record.get("price", 0.0)),
            side=Side.parse(record["side"]),
        )


@dataclass(frozen=True)
class Trade:
    """Backtest trade record; capital is the simulator's capital after the trade, net of fees."""
    time: datetime
    side: SignalSide
    quantity: float
    price: float
    capital: float

    @property
    def notional(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class Balance:
    free: float
    locked: float = 0.0
