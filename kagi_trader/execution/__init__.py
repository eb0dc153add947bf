"""Execution: exchange abstraction and Binance Spot implementation."""

from kagi_trader.execution.base import ExecutionClient, OrderResult
from kagi_trader.execution.binance_spot import BinanceSpotClient

__all__ = ["ExecutionClient", "OrderResult", "BinanceSpotClient"]
