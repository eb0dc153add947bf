"""Quantity and price precision: decimal truncation and exchange LOT_SIZE / PRICE_FILTER rules."""

from __future__ import annotations
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN
from typing import Optional


def truncate(value: float, decimals: int) -> float:
    """Cut (not round) to `decimals` places: 1.239 -> 1.23, -1.239 -> -1.23."""
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_DOWN))


@dataclass(frozen=True)
class SymbolFilters:
    min_qty: float = 0.01
    lot_step: float = 0.01
    price_tick: float = 0.01

    @classmethod
    def from_symbol_info(cls, symbol_info: Optional[dict]) -> "SymbolFilters":
        """Read LOT_SIZE and PRICE_FILTER from exchangeInfo; missing entries keep the defaults."""
        values = {}
        for flt in (symbol_info or {}).get("filters", []):
            kind = flt.get("filterType")
            if kind == "LOT_SIZE":
                values["min_qty"] = float(flt.get("minQty", cls.min_qty))
                values["lot_step"] = float(flt.get("stepSize", cls.lot_step))
            elif kind == "PRICE_FILTER":
                values["price_tick"] = float(flt.get("tickSize", cls.price_tick))
        return cls(**values)

    def round_quantity(self, qty: float) -> float:
        """Floor to the lot step; 0 when the result is under min_qty."""
        if qty <= 0:
            return 0.0
        # tolerance keeps 1.23 / 0.01 from flooring to 122
        steps = math.floor(qty / self.lot_step + 1e-9)
        qty = round(steps * self.lot_step, 8)
        return qty if qty >= self.min_qty else 0.0

    def round_price(self, price: float) -> float:
        """Nearest multiple of the price tick."""
        return round(round(price / self.price_tick) * self.price_tick, 8)
