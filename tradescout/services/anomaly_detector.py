"""Anomaly detection over live quotes.

Compares a symbol's intraday drop and volume against its latest volatility
baselines. The pure helpers below do the math; ``AnomalyDetector`` wires them
to the store and the market-data fetcher and runs watchlist scans.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Sequence

from tradescout.config import Settings
from tradescout.models.volatility_metrics import VolatilityMetrics
from tradescout.schemas.signal import HistoricalContext, OpportunitySignal, Quote
from tradescout.services import statistics
from tradescout.services.market_data import fetch_quote as default_fetch_quote
from tradescout.store import Store
from tradescout.utils.constants import (
    MAX_PRICE_POINTS,
    MAX_TREND_POINTS,
    MAX_VOLUME_POINTS,
    PRICE_POINTS_PER_SIGMA,
    PRICE_Z_FLOOR,
    TREND_POINTS_PER_PCT,
    VOLUME_POINTS_PER_SIGMA,
)

logger = logging.getLogger(__name__)

QuoteFetcher = Callable[[str], Awaitable[Quote]]


# ---------------------------------------------------------------------------
# Pure computation
# ---------------------------------------------------------------------------

def compute_current_drop_pct(price: float, open_price: float) -> float:
    """Percent move from today's open; 0 when the open is 0."""
    if open_price == 0:
        return 0.0
    return (price - open_price) / open_price * 100.0


def compute_confidence(price_z: float, volume_z: float, avg_daily_change_pct: float | None) -> float:
    """Score 0-100 built from the price term, the low-volume term and the trend bonus.

    -2σ scores nothing on price, -3σ scores 25 and -4σ saturates at 50.
    Below-average volume adds 10 points per σ up to 30. A positive average
    daily change adds twice its value up to 20.
    """
    confidence = statistics.clamp(
        (abs(price_z) - PRICE_Z_FLOOR) * PRICE_POINTS_PER_SIGMA, 0.0, MAX_PRICE_POINTS
    )

    if volume_z < 0:
        confidence += statistics.clamp(
            abs(volume_z) * VOLUME_POINTS_PER_SIGMA, 0.0, MAX_VOLUME_POINTS
        )

    if avg_daily_change_pct is not None and avg_daily_change_pct > 0:
        confidence += min(MAX_TREND_POINTS, avg_daily_change_pct * TREND_POINTS_PER_PCT)

    return statistics.clamp(confidence, 0.0, 100.0)


def build_reason(
    current_drop_pct: float,
    price_z: float,
    volume_z: float,
    metrics: VolatilityMetrics,
) -> str:
    direction = "below" if volume_z < 0 else "above"
    lines = [
        f"Drop: {current_drop_pct:.2f}% from open",
        f"Historical avg: {metrics.avg_max_drop_pct:.2f}% ± {metrics.stddev_max_drop_pct:.2f}%",
        f"Price Z-Score: {price_z:.2f}σ below normal",
        f"Volume Z-Score: {volume_z:.2f}σ {direction} average",
    ]
    if volume_z < 0:
        lines.append("Low volume suggests overreaction, not fundamental issue")
    return "\n".join(lines)


def analyze_quote(
    quote: Quote,
    metrics: VolatilityMetrics,
    settings: Settings,
    now: datetime | None = None,
) -> OpportunitySignal | None:
    """Score ``quote`` against ``metrics``. None when the quote lacks price, open or volume."""
    if not quote.is_complete:
        return None

    current_drop_pct = compute_current_drop_pct(quote.price, quote.open)
    price_z = statistics.zscore(
        current_drop_pct, metrics.avg_max_drop_pct, metrics.stddev_max_drop_pct
    )
    volume_z = statistics.zscore(
        float(quote.volume), float(metrics.avg_volume), float(metrics.stddev_volume)
    )
    confidence = compute_confidence(price_z, volume_z, metrics.avg_daily_change_pct)

    is_opportunity = (
        price_z < settings.min_price_zscore
        and volume_z < settings.min_volume_zscore
        and confidence >= settings.min_confidence
    )

    return OpportunitySignal(
        symbol=quote.symbol,
        current_price=quote.price,
        today_open=quote.open,
        today_high=quote.day_high,
        today_low=quote.day_low,
        current_volume=quote.volume,
        current_drop_pct=current_drop_pct,
        price_zscore=price_z,
        volume_zscore=volume_z,
        confidence=confidence,
        is_opportunity=is_opportunity,
        reason=build_reason(current_drop_pct, price_z, volume_z, metrics),
        historical_context=HistoricalContext(
            avg_max_drop_pct=metrics.avg_max_drop_pct,
            stddev_max_drop_pct=metrics.stddev_max_drop_pct,
            avg_volume=metrics.avg_volume,
            stddev_volume=metrics.stddev_volume,
            avg_daily_change_pct=metrics.avg_daily_change_pct,
        ),
        timestamp=now or datetime.now(timezone.utc),
    )


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------

class AnomalyDetector:
    def __init__(
        self,
        store: Store,
        settings: Settings,
        fetch_quote: QuoteFetcher = default_fetch_quote,
    ):
        self.store = store
        self.settings = settings
        self.fetch_quote = fetch_quote
        # Shared by every scan so overlapping scans respect one fetch limit
        self._fetch_slots = asyncio.Semaphore(settings.max_concurrent_fetches)

    async def analyze_symbol(self, symbol: str) -> OpportunitySignal | None:
        """Analyze one symbol. Returns the signal whether or not it is an opportunity.

        None when the quote is incomplete or no metrics exist yet.
        Market-data errors and timeouts propagate.
        """
        quote = await asyncio.wait_for(
            self.fetch_quote(symbol), timeout=self.settings.fetch_timeout_seconds
        )
        if not quote.is_complete:
            logger.debug(f"[{symbol}] Skipping - incomplete quote")
            return None

        metrics = self.store.latest_metrics(symbol)
        if metrics is None:
            logger.debug(f"[{symbol}] Skipping - no volatility metrics")
            return None

        return analyze_quote(quote, metrics, self.settings)

    async def scan(self, watchlist: Sequence[str] | None = None) -> list[OpportunitySignal]:
        """Scan the watchlist concurrently; returns flagged signals in watchlist order."""
        symbols = list(watchlist if watchlist is not None else self.settings.watchlist)
        logger.info(f"Scanning {len(symbols)} stocks for opportunities")

        delay = self.settings.request_delay_ms / 1000.0

        async def _scan_one(symbol: str) -> OpportunitySignal | None:
            async with self._fetch_slots:
                try:
                    signal = await self.analyze_symbol(symbol)
                except asyncio.TimeoutError:
                    logger.error(f"[{symbol}] Quote fetch timed out")
                    return None
                except Exception as e:
                    logger.error(f"[{symbol}] Error analyzing: {e}")
                    return None
                finally:
                    if delay > 0:
                        await asyncio.sleep(delay)

            if signal is not None and signal.is_opportunity:
                logger.info(
                    f"[{symbol}] Opportunity detected ({signal.confidence:.0f}% confidence)"
                )
                return signal
            return None

        results = await asyncio.gather(*(_scan_one(s) for s in symbols))
        opportunities = [r for r in results if r is not None]
        logger.info(f"Scan complete: {len(opportunities)} opportunities found")
        return opportunities
