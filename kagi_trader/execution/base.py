"""Abstract execution interface: market data, order placement, account state."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

import pandas as pd

from kagi_trader.core.types import Balance, OrderIntent, TradeInfo


@dataclass
class OrderResult:
    """Result of placing an order."""
    success: bool
    order_id: Optional[int] = None
    client_order_id: Optional[str] = None
    message: str = ""


class ExecutionClient(ABC):
    """
    Exchange calls used by the live engine. Benign rejections (e.g. nothing
    to cancel) return empty results; other failures raise ExchangeRejectionError.
    """

    @abstractmethod
    def get_klines(self, symbol: str, interval: str, limit: int = 500) -> pd.DataFrame:
        """Return OHLCV DataFrame with columns: time, open, high, low, close, volume, close_time."""
        pass

    @abstractmethod
    def get_price(self, symbol: str) -> float:
        """Last traded price."""
        pass

    @abstractmethod
    def place_limit_order(self, intent: OrderIntent) -> OrderResult:
        """Submit a GTC limit order under intent.client_order_id."""
        pass

    @abstractmethod
    def cancel_all_open_orders(self, symbol: str) -> List[dict]:
        """Cancel every open order on symbol. No open orders is not an error."""
        pass

    @abstractmethod
    def cancel_order(self, symbol: str, order_id: int) -> Optional[dict]:
        """Cancel one order. None if the exchange no longer knows it."""
        pass

    @abstractmethod
    def fetch_open_orders(self, symbol: str) -> List[dict]:
        pass

    @abstractmethod
    def fetch_order(self, symbol: str, client_order_id: str) -> Optional[TradeInfo]:
        """Current exchange record of an order, or None if unknown."""
        pass

    @abstractmethod
    def fetch_account_balances(self) -> Dict[str, Balance]:
        """Free and locked amount per asset."""
        pass

    def get_symbol_info(self, symbol: str) -> Optional[dict]:
        """Optional: exchange symbol info (filters). Default None."""
        return None
