"""
Binance Spot execution with retry and rate-limit handling.
"""

from __future__ import annotations
import logging
import time
from functools import wraps
from typing import Dict, List, Optional

import pandas as pd

from binance.client import Client
from binance.exceptions import BinanceAPIException

from kagi_trader.core.errors import ExchangeRejectionError
from kagi_trader.core.types import Balance, OrderIntent, TradeInfo
from kagi_trader.execution.base import ExecutionClient, OrderResult

logger = logging.getLogger("kagi_trader.execution.binance")

# -2011: cancel rejected / unknown order sent, -2013: order does not exist
BENIGN_ERROR_CODES = (-2011, -2013)


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on 429 or 418 (rate limit)."""
    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            last_exc = None
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except BinanceAPIException as e:
                    last_exc = e
                    if e.status_code in (429, 418) and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                        time.sleep(delay)
                    else:
                        raise
            raise last_exc
        return wrapped
    return decorator


def _rejection(e: BinanceAPIException) -> ExchangeRejectionError:
    return ExchangeRejectionError(str(e.message), code=e.code)


class BinanceSpotClient(ExecutionClient):
    """Binance Spot client (testnet and live)."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        testnet: bool = True,
        recv_window: int = 10000,
        client: Optional[Client] = None,
    ):
        self._client = client or Client(api_key, api_secret, testnet=testnet)
        self.recv_window = recv_window
        logger.info("Binance Spot: using %s", "TESTNET" if testnet else "LIVE")

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def get_klines(self, symbol: str, interval: str, limit: int = 500) -> pd.DataFrame:
        raw = self._client.get_klines(symbol=symbol, interval=interval, limit=limit)
        df = pd.DataFrame(raw, columns=[
            "open_time", "open", "high", "low", "close", "volume",
            "close_time", "quote_av", "num_trades", "tb_base_av", "tb_quote_av", "ignore"
        ])
        df[["open", "high", "low", "close", "volume"]] = df[["open", "high", "low", "close", "volume"]].astype(float)
        df["time"] = pd.to_datetime(df["open_time"], unit="ms", utc=True)
        df["close_time"] = pd.to_datetime(df["close_time"], unit="ms", utc=True)
        return df[["time", "open", "high", "low", "close", "volume", "close_time"]]

    @retry_on_rate_limit(max_retries=2)
    def get_price(self, symbol: str) -> float:
        return float(self._client.get_symbol_ticker(symbol=symbol)["price"])

    @retry_on_rate_limit(max_retries=2)
    def get_symbol_info(self, symbol: str) -> Optional[dict]:
        return self._client.get_symbol_info(symbol)

    def place_limit_order(self, intent: OrderIntent) -> OrderResult:
        try:
            res = self._client.create_order(
                symbol=intent.symbol,
                side=intent.side.value,
                type=intent.order_type.value,
                timeInForce="GTC",
                quantity=f"{intent.quantity:f}",
                price=f"{intent.limit_price:f}",
                newClientOrderId=intent.client_order_id,
                recvWindow=self.recv_window,
            )
        except BinanceAPIException as e:
            logger.error("Binance order error for %s: %s", intent.client_order_id, e)
            raise _rejection(e) from e
        return OrderResult(
            success=True,
            order_id=int(res.get("orderId", 0)),
            client_order_id=res.get("clientOrderId", intent.client_order_id),
        )

    def cancel_all_open_orders(self, symbol: str) -> List[dict]:
        logger.info("Canceling all open orders on %s", symbol)
        canceled = []
        for order in self.fetch_open_orders(symbol):
            res = self.cancel_order(symbol, int(order["orderId"]))
            if res is not None:
                canceled.append(res)
        if not canceled:
            logger.debug("No open orders to cancel")
        return canceled

    def cancel_order(self, symbol: str, order_id: int) -> Optional[dict]:
        logger.debug("Canceling order %s", order_id)
        try:
            return self._client.cancel_order(symbol=symbol, orderId=order_id, recvWindow=self.recv_window)
        except BinanceAPIException as e:
            if e.code in BENIGN_ERROR_CODES:
                logger.debug("No order %s to cancel", order_id)
                return None
            logger.error("Failed to cancel order %s: %s", order_id, e)
            raise _rejection(e) from e

    @retry_on_rate_limit(max_retries=2)
    def fetch_open_orders(self, symbol: str) -> List[dict]:
        try:
            return self._client.get_open_orders(symbol=symbol, recvWindow=self.recv_window)
        except BinanceAPIException as e:
            if e.status_code in (429, 418):
                raise
            raise _rejection(e) from e

    @retry_on_rate_limit(max_retries=2)
    def fetch_order(self, symbol: str, client_order_id: str) -> Optional[TradeInfo]:
        try:
            record = self._client.get_order(
                symbol=symbol, origClientOrderId=client_order_id, recvWindow=self.recv_window
            )
        except BinanceAPIException as e:
            if e.code in BENIGN_ERROR_CODES:
                return None
            if e.status_code in (429, 418):
                raise
            raise _rejection(e) from e
        return TradeInfo.from_order_record(record)

    @retry_on_rate_limit(max_retries=2)
    def fetch_account_balances(self) -> Dict[str, Balance]:
        start = time.monotonic()
        try:
            account = self._client.get_account(recvWindow=self.recv_window)
        except BinanceAPIException as e:
            if e.status_code in (429, 418):
                raise
            logger.error("Failed to get account info in %.0fms: %s", (time.monotonic() - start) * 1000, e)
            raise _rejection(e) from e
        logger.debug("Account request took %.0fms", (time.monotonic() - start) * 1000)
        return {
            b["asset"]: Balance(free=float(b["free"]), locked=float(b["locked"]))
            for b in account.get("balances", [])
        }
