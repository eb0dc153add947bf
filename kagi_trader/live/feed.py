"""
Kline polling feed. Runs in its own thread and only enqueues closed candles
the engine has not seen yet.
"""

from __future__ import annotations
import logging
import queue
import threading
from datetime import datetime
from typing import Callable, List, Optional

from kagi_trader.core.types import Candle
from kagi_trader.data.loader import candles_from_frame
from kagi_trader.execution.base import ExecutionClient
from kagi_trader.live.engine import utc_now

logger = logging.getLogger("kagi_trader.live.feed")


class KlinePoller:
    """Polls the most recent klines every poll_seconds and pushes newly closed ones onto events."""

    def __init__(
        self,
        client: ExecutionClient,
        symbol: str,
        interval: str,
        events: "queue.Queue",
        poll_seconds: float = 5.0,
        since: Optional[datetime] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.client = client
        self.symbol = symbol
        self.interval = interval
        self.events = events
        self.poll_seconds = poll_seconds
        self.last_time = since
        self.clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def poll_once(self) -> List[Candle]:
        """Enqueue closed candles newer than the last one seen. Returns them."""
        df = self.client.get_klines(self.symbol, self.interval, limit=3)
        df = df[df["close_time"] <= self.clock()]
        candles = [c for c in candles_from_frame(df) if self.last_time is None or c.time > self.last_time]
        if self.last_time is None and candles:
            # first poll without a warm-up: start from the newest closed candle only
            candles = candles[-1:]
        for candle in candles:
            self.events.put(candle)
            self.last_time = candle.time
            logger.debug("Queued candle %s close=%s", candle.time, candle.close)
        return candles

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.exception("Kline poll failed: %s", e)
            self._stop.wait(self.poll_seconds)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=f"klines-{self.symbol}", daemon=True)
        self._thread.start()
        logger.info("Polling %s %s klines every %.1fs", self.symbol, self.interval, self.poll_seconds)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
