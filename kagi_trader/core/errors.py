"""
Exception types. Insufficient history and stale orders are not errors:
the first yields Signal.none(), the second is a reset reason.
"""

from __future__ import annotations
from typing import Optional


class KagiTraderError(Exception):
    """Base class for all errors raised by kagi_trader."""


class AmbiguousSignalError(KagiTraderError):
    """Long and short crossing conditions were both true for one candle."""

    def __init__(self, wma: float, line: float):
        super().__init__(f"both long and short detected (wma={wma}, kagi={line})")
        self.wma = wma
        self.line = line


class InvalidExchangeEnumError(KagiTraderError, ValueError):
    """Side, order type or order status string from the exchange is unknown."""

    def __init__(self, kind: str, value: str):
        super().__init__(f"invalid {kind}: {value!r}")
        self.kind = kind
        self.value = value


class ExchangeRejectionError(KagiTraderError):
    """Exchange refused a request for a reason that is not benign."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message if code is None else f"[{code}] {message}")
        self.code = code


class ActiveOrderError(KagiTraderError):
    """Illegal operation on the active order slot."""
