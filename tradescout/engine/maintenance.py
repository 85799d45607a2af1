"""Market-data maintenance: initial history load, daily refresh, metrics, retention.

Batch operations loop over the watchlist and catch per-symbol failures so one
bad ticker never stops the others.
"""

import asyncio
import logging
import time
from datetime import date, timedelta
from typing import Awaitable, Callable

from tradescout.config import Settings, settings as default_settings
from tradescout.models.daily_bar import DailyBar
from tradescout.models.performance_metrics import PeriodType
from tradescout.models.volatility_metrics import VolatilityMetrics
from tradescout.schemas.signal import Quote
from tradescout.services import market_data
from tradescout.services.volatility import build_volatility_metrics
from tradescout.store import Store
from tradescout.utils.constants import METRICS_RETENTION_GRACE_DAYS
from tradescout.utils.dates import last_trading_day, previous_period_bounds, today_in

logger = logging.getLogger(__name__)

HistoryFetcher = Callable[[str, date, date], Awaitable[list[DailyBar]]]
QuoteFetcher = Callable[[str], Awaitable[Quote]]


class MaintenanceService:
    def __init__(
        self,
        store: Store,
        settings: Settings,
        fetch_quote: QuoteFetcher = market_data.fetch_quote,
        fetch_history: HistoryFetcher = market_data.fetch_history,
    ):
        self.store = store
        self.settings = settings
        self.fetch_quote = fetch_quote
        self.fetch_history = fetch_history

    def _today(self) -> date:
        return today_in(self.settings.tz)

    async def _pause(self):
        if self.settings.request_delay_ms > 0:
            await asyncio.sleep(self.settings.request_delay_ms / 1000.0)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def load_history_for_symbol(
        self, symbol: str, days_back: int, today: date | None = None
    ) -> int:
        """Fetch ``days_back`` calendar days of bars and insert the ones not stored yet."""
        end = today or self._today()
        start = end - timedelta(days=days_back)
        logger.debug(f"[{symbol}] Fetching {days_back} days of history")

        bars = await asyncio.wait_for(
            self.fetch_history(symbol, start, end),
            timeout=self.settings.fetch_timeout_seconds,
        )
        saved = self.store.add_bars_if_absent(bars)
        logger.debug(f"[{symbol}] Saved {saved} new records")
        return saved

    async def load_initial_data(self, today: date | None = None) -> dict:
        """Load ``lookback_days`` of history for the watchlist, then compute metrics."""
        watchlist = self.settings.watchlist
        lookback = self.settings.lookback_days
        logger.info(f"Loading initial data for {len(watchlist)} symbols, {lookback} days back")

        started = time.monotonic()
        success, failed = 0, 0
        for i, symbol in enumerate(watchlist, start=1):
            logger.info(f"[{i}/{len(watchlist)}] Loading {symbol}")
            try:
                await self.load_history_for_symbol(symbol, lookback, today)
                success += 1
            except Exception as e:
                logger.error(f"[{symbol}] Failed to load data: {e}")
                failed += 1
            await self._pause()

        logger.info(
            f"Initial data load complete: {success} success, {failed} failed, "
            f"{time.monotonic() - started:.0f}s"
        )
        computed = self.calculate_metrics_for_all(today)
        return {"loaded": success, "failed": failed, "metrics_computed": computed}

    async def update_todays_data(self, today: date | None = None) -> dict:
        """Refresh today's bar for every watchlist symbol from a live quote."""
        today = today or self._today()
        watchlist = self.settings.watchlist
        if last_trading_day(today) != today:
            logger.info(
                f"{today} is not a trading day; last session was {last_trading_day(today)}, "
                "no bars updated"
            )
            return {"updated": 0, "skipped": len(watchlist), "failed": 0}

        logger.info(f"Updating today's data for {len(watchlist)} symbols")

        updated, skipped, failed = 0, 0, 0
        for symbol in watchlist:
            try:
                quote = await asyncio.wait_for(
                    self.fetch_quote(symbol), timeout=self.settings.fetch_timeout_seconds
                )
                if not quote.is_complete or not quote.price:
                    logger.debug(f"[{symbol}] Skipping - incomplete quote")
                    skipped += 1
                    continue

                self.store.upsert_bar(DailyBar(
                    symbol=symbol,
                    trade_date=today,
                    open_price=quote.open,
                    high_price=quote.day_high if quote.day_high is not None else quote.price,
                    low_price=quote.day_low if quote.day_low is not None else quote.price,
                    close_price=quote.price,
                    volume=quote.volume,
                ))
                updated += 1
            except Exception as e:
                logger.error(f"[{symbol}] Failed to update today's data: {e}")
                failed += 1
            await self._pause()

        logger.info(f"Today's data update complete: {updated} updated, {skipped} skipped")
        return {"updated": updated, "skipped": skipped, "failed": failed}

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def calculate_metrics_for_symbol(
        self, symbol: str, lookback_days: int | None = None, today: date | None = None
    ) -> VolatilityMetrics | None:
        lookback = lookback_days or self.settings.lookback_days
        today = today or self._today()
        bars = self.store.bars_since(symbol, today - timedelta(days=lookback))
        if not bars:
            logger.warning(f"[{symbol}] No historical data found")
            return None

        metrics = build_volatility_metrics(symbol, bars, lookback, today)
        return self.store.save_volatility_metrics(metrics)

    def calculate_metrics_for_all(self, today: date | None = None) -> int:
        watchlist = self.settings.watchlist
        logger.info(f"Calculating volatility metrics for {len(watchlist)} symbols")
        computed = 0
        for symbol in watchlist:
            try:
                if self.calculate_metrics_for_symbol(symbol, today=today) is not None:
                    computed += 1
            except Exception as e:
                logger.error(f"[{symbol}] Failed to calculate metrics: {e}")
        logger.info("Metrics calculation complete")
        return computed

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def cleanup_old_data(self, days_to_keep: int | None = None, today: date | None = None) -> dict:
        """Purge bars older than ``days_to_keep``; metrics are kept a further grace period."""
        keep = days_to_keep or self.settings.retention_days
        today = today or self._today()
        bar_cutoff = today - timedelta(days=keep)
        metrics_cutoff = bar_cutoff - timedelta(days=METRICS_RETENTION_GRACE_DAYS)

        bars_deleted = self.store.delete_bars_before(bar_cutoff)
        metrics_deleted = self.store.delete_metrics_before(metrics_cutoff)
        logger.info(
            f"Cleanup removed {bars_deleted} bars before {bar_cutoff} and "
            f"{metrics_deleted} metrics rows before {metrics_cutoff}"
        )
        return {"bars_deleted": bars_deleted, "metrics_deleted": metrics_deleted}


def get_maintenance_service() -> MaintenanceService:
    from tradescout.store import get_store
    return MaintenanceService(get_store(), default_settings)


# ---------------------------------------------------------------------------
# Scheduled jobs
# ---------------------------------------------------------------------------

async def run_daily_maintenance():
    """Refresh today's bars, recompute metrics, purge old rows."""
    logger.info("Starting daily maintenance job")
    started = time.monotonic()
    service = get_maintenance_service()
    try:
        logger.info("Step 1: Updating today's market data")
        await service.update_todays_data()
        logger.info("Step 2: Recalculating volatility metrics")
        service.calculate_metrics_for_all()
        logger.info("Step 3: Cleaning up old data")
        service.cleanup_old_data()
    except Exception as e:
        logger.error(f"Daily maintenance job failed: {e}", exc_info=True)
        return
    logger.info(f"Daily maintenance complete in {time.monotonic() - started:.0f}s")


async def run_period_report(
    period_type: PeriodType = PeriodType.QUARTERLY, today: date | None = None
):
    """Report on the period that closed before ``today`` and push its summary.

    The job fires at the start of a period, so the period containing ``today``
    has no trades yet.
    """
    from tradescout.services.performance import PerformanceTracker
    from tradescout.services.telegram_bot import get_bot
    from tradescout.store import get_store

    logger.info(f"Starting {period_type.value.lower()} report job")
    try:
        tracker = PerformanceTracker(get_store(), default_settings)
        today = today or today_in(default_settings.tz)
        _, closed_end = previous_period_bounds(period_type, today)
        report = tracker.generate_period_report(period_type, as_of=closed_end)
    except Exception as e:
        logger.error(f"Period report job failed: {e}", exc_info=True)
        return

    bot = get_bot()
    if default_settings.alerts_enabled and bot is not None:
        try:
            bot.send_period_report(report)
        except Exception as e:
            logger.error(f"Failed to send period report: {e}")
    logger.info(f"{period_type.value.capitalize()} report complete")


async def run_opportunity_scan():
    from tradescout.engine.opportunity import get_orchestrator
    try:
        await get_orchestrator().scan_and_alert()
    except Exception as e:
        logger.error(f"Opportunity scan job failed: {e}", exc_info=True)
