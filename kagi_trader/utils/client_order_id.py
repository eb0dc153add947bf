"""
Client order ids: "<unix ms>-<TAG>".

The tag names the logical role of the order (entry, rebalancing) so that
execution reports can be routed back to the slot that placed it. Parsing
splits on the last separator only and validates the tag against OrderTag.
"""

from __future__ import annotations
from typing import Optional

from kagi_trader.core.types import OrderTag

SEPARATOR = "-"


def make_client_order_id(timestamp_ms: int, tag: OrderTag) -> str:
    return f"{int(timestamp_ms)}{SEPARATOR}{tag.value}"


def parse_order_tag(client_order_id: str) -> Optional[OrderTag]:
    """Return the tag of an id built by make_client_order_id, else None."""
    _, sep, suffix = (client_order_id or "").rpartition(SEPARATOR)
    if not sep:
        return None
    try:
        return OrderTag(suffix)
    except ValueError:
        return None
