"""
Position sizing for spot entries.
Long spends a share of the free quote balance; short sells a share of the free base balance.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from kagi_trader.core.types import Side
from kagi_trader.utils.precision import SymbolFilters, truncate

logger = logging.getLogger("kagi_trader.risk")


@dataclass
class SizingResult:
    """Result of sizing: allowed or rejected + reason."""
    allowed: bool
    quantity: float = 0.0
    reason: str = ""


class PositionSizer:
    """
    Quantity = free quote / price * equity_pct (long) or free base * equity_pct
    (short), truncated to `decimals` and to the symbol's lot step.
    """

    def __init__(
        self,
        equity_pct: float = 95.0,
        min_notional: float = 0.001,
        decimals: int = 2,
        symbol_info: Optional[dict] = None,
    ):
        if not 0 < equity_pct <= 100:
            raise ValueError(f"equity_pct must be in (0, 100], got {equity_pct}")
        self.equity_pct = equity_pct
        self.min_notional = min_notional
        self.decimals = decimals
        self.filters = SymbolFilters.from_symbol_info(symbol_info)

    def size(self, side: Side, price: float, free_quote: float, free_base: float) -> SizingResult:
        if price <= 0:
            return SizingResult(allowed=False, reason="non-positive price")
        share = self.equity_pct / 100.0
        raw = free_quote / price * share if side == Side.BUY else free_base * share
        qty = self.filters.round_quantity(truncate(raw, self.decimals))
        if qty <= 0:
            return SizingResult(allowed=False, reason="qty rounded to 0")
        notional = qty * price
        if notional < self.min_notional:
            return SizingResult(allowed=False, reason=f"notional {notional:.4f} < min {self.min_notional}")
        return SizingResult(allowed=True, quantity=qty)

    def update_symbol_info(self, symbol_info: Optional[dict]) -> None:
        """Update lot/price filters when exchange info changes."""
        self.filters = SymbolFilters.from_symbol_info(symbol_info)
