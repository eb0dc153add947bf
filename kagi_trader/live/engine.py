"""
Live engine: one symbol, one entry slot, one event consumer.

Candles and execution reports arrive on a queue and are handled strictly one
at a time; exchange calls are synchronous, so no two placements can race for
the symbol. Any failure reaching the loop resets the slot and cancels every
open order before the next event is taken.
"""

from __future__ import annotations
import logging
import queue
from datetime import datetime, timezone
from typing import Callable, List, Optional

from kagi_trader.core.errors import ExchangeRejectionError
from kagi_trader.core.types import (
    Balance,
    Candle,
    OrderIntent,
    OrderTag,
    OrderTradeEvent,
    OrderType,
    Side,
    Signal,
    TradeInfo,
    to_unix_ms,
)
from kagi_trader.data.loader import candles_from_frame
from kagi_trader.execution.base import ExecutionClient
from kagi_trader.orders.active_order import ActiveOrder, ResetReason
from kagi_trader.risk.sizing import PositionSizer
from kagi_trader.strategies.base import BaseStrategy
from kagi_trader.utils.client_order_id import make_client_order_id
from kagi_trader.utils.precision import truncate
from kagi_trader.utils.telegram import TelegramNotifier

logger = logging.getLogger("kagi_trader.live")

PRICE_DECIMALS = 2


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LiveEngine:
    """Drives a strategy and the ActiveOrder slot against an ExecutionClient."""

    def __init__(
        self,
        client: ExecutionClient,
        strategy: BaseStrategy,
        symbol: str,
        base_asset: str,
        quote_asset: str,
        sizer: Optional[PositionSizer] = None,
        active_order: Optional[ActiveOrder] = None,
        notifier: Optional[TelegramNotifier] = None,
        disable_trading: bool = False,
        clock: Callable[[], datetime] = utc_now,
        interval: str = "30m",
    ):
        self.client = client
        self.strategy = strategy
        self.symbol = symbol
        self.base_asset = base_asset
        self.quote_asset = quote_asset
        self.sizer = sizer or PositionSizer()
        self.active_order = active_order or ActiveOrder()
        self.notifier = notifier or TelegramNotifier()
        self.disable_trading = disable_trading
        self.clock = clock
        self.interval = interval

    # --- events ---

    def process_candle(self, candle: Candle) -> Signal:
        """Run the strategy, sync an in-flight entry, then trade if the slot is (now) empty."""
        signal = self.strategy.process_candle(candle)
        if not signal.is_none:
            self.notifier.signal(signal)

        if not self.active_order.is_empty:
            self.sync_active_order()
        if signal.is_none:
            return signal
        if not self.active_order.is_empty:
            logger.info("Entry %s in flight, ignoring %s", self.active_order.client_order_id, signal.describe())
        elif self.disable_trading:
            logger.info("Trading disabled, ignoring %s", signal.describe())
        else:
            self.handle_signal(candle, signal)
        return signal

    def on_order_event(self, event: OrderTradeEvent) -> Optional[ResetReason]:
        if event.symbol != self.symbol:
            logger.debug("Ignoring order event for %s", event.symbol)
            return None
        if self.active_order.update_from_event(event):
            info = self.active_order.entry
            if isinstance(info, TradeInfo) and info.quantity > 0:
                self.notifier.filled(info)
        return self.check_active_order()

    # --- slot maintenance ---

    def sync_active_order(self) -> Optional[ResetReason]:
        """Fetch the tracked order from the exchange and reconcile against it."""
        client_order_id = self.active_order.client_order_id
        if client_order_id is None:
            return None
        fresh = self.client.fetch_order(self.symbol, client_order_id)
        return self.check_active_order(fresh)

    def check_active_order(self, fresh: Optional[TradeInfo] = None) -> Optional[ResetReason]:
        reason = self.active_order.reconcile(now=self.clock(), fresh=fresh)
        if reason is not None:
            self.cancel_all_open_orders()
            self.notifier.reset(reason.value)
        return reason

    def reset_active_order(self) -> List[dict]:
        self.active_order.reset()
        return self.cancel_all_open_orders()

    def cancel_all_open_orders(self) -> List[dict]:
        canceled = self.client.cancel_all_open_orders(self.symbol)
        if canceled:
            logger.info("Canceled %d open orders on %s", len(canceled), self.symbol)
        return canceled

    # --- orders ---

    def balances(self) -> tuple[Balance, Balance]:
        """(base, quote) free/locked balances."""
        account = self.client.fetch_account_balances()
        base = account.get(self.base_asset, Balance(0.0))
        quote = account.get(self.quote_asset, Balance(0.0))
        logger.info(
            "Balances | %s free=%s locked=%s | %s free=%s locked=%s",
            self.quote_asset, quote.free, quote.locked, self.base_asset, base.free, base.locked,
        )
        return base, quote

    def handle_signal(self, candle: Candle, signal: Signal) -> Optional[OrderIntent]:
        """Size and submit a LIMIT entry at the truncated close. None when nothing was placed."""
        side = Side.BUY if signal.is_long else Side.SELL
        price = self.sizer.filters.round_price(truncate(candle.close, PRICE_DECIMALS))
        base, quote = self.balances()
        sizing = self.sizer.size(side, price, quote.free, base.free)
        if not sizing.allowed:
            logger.warning("Entry %s rejected by sizing: %s", side.value, sizing.reason)
            return None

        intent = OrderIntent(
            symbol=self.symbol,
            client_order_id=make_client_order_id(to_unix_ms(candle.time), OrderTag.ENTRY),
            tag=OrderTag.ENTRY,
            side=side,
            order_type=OrderType.LIMIT,
            quantity=sizing.quantity,
            limit_price=price,
            submitted_at=to_unix_ms(self.clock()),
        )
        self.active_order.add_entry(intent)
        try:
            result = self.client.place_limit_order(intent)
        except ExchangeRejectionError as e:
            logger.error("Entry %s rejected (code %s): %s", intent.client_order_id, e.code, e)
            self.reset_active_order()
            return None
        if not result.success:
            logger.error("Entry %s failed: %s", intent.client_order_id, result.message)
            self.reset_active_order()
            return None
        self.notifier.entry(intent)
        return intent

    def equalize_assets(self) -> List[OrderIntent]:
        """Rebalance free base and quote to 50/50 by value with EQUALIZE_* limit orders."""
        logger.info("Equalizing assets")
        base, quote = self.balances()
        price = self.sizer.filters.round_price(self.client.get_price(self.symbol))
        quote_in_base = quote.free / price
        equal = truncate((quote_in_base + base.free) / 2.0, 2)
        quote_diff = truncate(quote_in_base - equal, 2)
        base_diff = truncate(base.free - equal, 2)

        placed = []
        now_ms = to_unix_ms(self.clock())
        for diff, side, tag in (
            (quote_diff, Side.BUY, OrderTag.EQUALIZE_QUOTE),
            (base_diff, Side.SELL, OrderTag.EQUALIZE_BASE),
        ):
            if diff <= 0 or diff * price < self.sizer.min_notional:
                continue
            intent = OrderIntent(
                symbol=self.symbol,
                client_order_id=make_client_order_id(now_ms, tag),
                tag=tag,
                side=side,
                order_type=OrderType.LIMIT,
                quantity=diff,
                limit_price=price,
                submitted_at=now_ms,
            )
            logger.info("%s %s %s @ %s to reach %s %s", tag.value, side.value, diff, price, equal, self.base_asset)
            result = self.client.place_limit_order(intent)
            if not result.success:
                raise ExchangeRejectionError(f"{tag.value} failed: {result.message}")
            placed.append(intent)
        return placed

    # --- startup and loop ---

    def load_recent_candles(self, limit: Optional[int] = None) -> List[Candle]:
        """Warm the strategy with the most recent closed candles (window capacity - 1 by default)."""
        limit = limit or max(self.strategy.warmup_candles - 1, 1)
        df = self.client.get_klines(self.symbol, self.interval, limit=limit + 1)
        if "close_time" in df.columns:
            df = df[df["close_time"] <= self.clock()]
        candles = candles_from_frame(df.tail(limit))
        for candle in candles:
            self.strategy.process_candle(candle)
        logger.info("Warmed strategy with %d candles", len(candles))
        return candles

    def handle_event(self, event) -> None:
        if isinstance(event, Candle):
            self.process_candle(event)
        elif isinstance(event, OrderTradeEvent):
            self.on_order_event(event)
        else:
            logger.warning("Unknown event type %s", type(event).__name__)

    def run(self, events: "queue.Queue") -> None:
        """Consume events until a None sentinel arrives."""
        logger.info("Live engine started: %s (trading %s)", self.symbol,
                    "disabled" if self.disable_trading else "enabled")
        while True:
            event = events.get()
            if event is None:
                logger.info("Live engine stopped")
                break
            try:
                self.handle_event(event)
            except Exception as e:
                logger.exception("Event handling failed, resetting active order: %s", e)
                try:
                    self.reset_active_order()
                except Exception as cancel_error:
                    logger.exception("Cancel-all after failure also failed: %s", cancel_error)
