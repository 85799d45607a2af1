"""Per-symbol alert cooldown.

Holds the last alert time for each symbol. The map starts empty at process
start and is never persisted. Callers that check and then record must hold
``lock`` across both steps.
"""

import asyncio
import logging
from datetime import datetime

logger = logging.getLogger(__name__)


class AlertCooldown:
    def __init__(self):
        self.lock = asyncio.Lock()
        self._last_alert: dict[str, datetime] = {}

    def last_alert(self, symbol: str) -> datetime | None:
        return self._last_alert.get(symbol)

    def should_alert(self, symbol: str, now: datetime, cooldown_minutes: int) -> bool:
        """False while fewer than ``cooldown_minutes`` whole minutes have passed."""
        last = self._last_alert.get(symbol)
        if last is None:
            return True
        elapsed_minutes = int((now - last).total_seconds()) // 60
        if elapsed_minutes < cooldown_minutes:
            logger.debug(
                f"[{symbol}] Alert cooldown active "
                f"({cooldown_minutes - elapsed_minutes} min remaining)"
            )
            return False
        return True

    def record(self, symbol: str, now: datetime):
        self._last_alert[symbol] = now
