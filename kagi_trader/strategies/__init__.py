"""Strategies: base interface and implementations."""

from kagi_trader.strategies.base import BaseStrategy
from kagi_trader.strategies.kagi_wma import SignalDetector

__all__ = ["BaseStrategy", "SignalDetector"]
