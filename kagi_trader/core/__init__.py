"""Core: config, types, errors, logging."""

from kagi_trader.core.config import load_config, Config
from kagi_trader.core.errors import (
    KagiTraderError,
    AmbiguousSignalError,
    InvalidExchangeEnumError,
    ExchangeRejectionError,
    ActiveOrderError,
)
from kagi_trader.core.types import (
    Candle,
    Signal,
    SignalSide,
    KagiState,
    KagiDirection,
    Trade,
    TradeInfo,
    OrderIntent,
)
from kagi_trader.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "KagiTraderError",
    "AmbiguousSignalError",
    "InvalidExchangeEnumError",
    "ExchangeRejectionError",
    "ActiveOrderError",
    "Candle",
    "Signal",
    "SignalSide",
    "KagiState",
    "KagiDirection",
    "Trade",
    "TradeInfo",
    "OrderIntent",
    "setup_logging",
]
