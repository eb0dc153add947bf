"""Telegram notifications. Never log token or chat_id."""

from __future__ import annotations
import logging

import requests

from kagi_trader.core.types import OrderIntent, Signal, TradeInfo

logger = logging.getLogger("kagi_trader.utils.telegram")


class TelegramNotifier:
    """Posts short trading messages. Silent no-op when not configured."""

    def __init__(self, bot_token: str = "", chat_id: str = "", prefix: str = ""):
        self._bot_token = bot_token
        self._chat_id = chat_id
        self.prefix = prefix

    @property
    def enabled(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    def send(self, text: str) -> bool:
        """Send message. Returns True on success; failures are logged, never raised."""
        if self.prefix:
            text = f"{self.prefix} | {text}"
        if not self.enabled:
            logger.debug("Telegram not configured, skipping message (len=%d)", len(text))
            return False
        try:
            url = f"https://api.telegram.org/bot{self._bot_token}/sendMessage"
            r = requests.post(url, json={"chat_id": self._chat_id, "text": text}, timeout=10)
            if r.status_code != 200:
                logger.warning("Telegram send failed: %s %s", r.status_code, r.text[:200])
                return False
            return True
        except requests.RequestException as e:
            logger.warning("Telegram error: %s", e)
            return False

    def signal(self, signal: Signal) -> bool:
        return self.send(f"Signal: {signal.describe()}")

    def entry(self, intent: OrderIntent) -> bool:
        return self.send(
            f"Entry {intent.side.value} {intent.symbol} qty={intent.quantity} limit={intent.limit_price}"
        )

    def filled(self, info: TradeInfo) -> bool:
        return self.send(f"Filled {info.side.value} qty={info.quantity} @ {info.price}")

    def reset(self, reason: str) -> bool:
        return self.send(f"Active order reset: {reason}")
