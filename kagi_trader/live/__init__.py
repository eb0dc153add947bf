"""Live trading: event-queue engine and kline polling feed."""

from kagi_trader.live.engine import LiveEngine
from kagi_trader.live.feed import KlinePoller

__all__ = ["LiveEngine", "KlinePoller"]
