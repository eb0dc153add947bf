"""Utils: Telegram, timeframes, precision, client order ids."""

from kagi_trader.utils.telegram import TelegramNotifier
from kagi_trader.utils.timeframes import timeframe_minutes, timeframe_delta
from kagi_trader.utils.precision import truncate, SymbolFilters
from kagi_trader.utils.client_order_id import make_client_order_id, parse_order_tag

__all__ = [
    "TelegramNotifier",
    "timeframe_minutes",
    "timeframe_delta",
    "truncate",
    "SymbolFilters",
    "make_client_order_id",
    "parse_order_tag",
]
