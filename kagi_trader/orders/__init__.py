"""Orders: the per-symbol active entry slot."""

from kagi_trader.orders.active_order import ActiveOrder, OrderState, ResetReason

__all__ = ["ActiveOrder", "OrderState", "ResetReason"]
