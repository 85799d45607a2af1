"""Opportunity orchestration: scan, filter, size and alert.

One ``scan_and_alert`` call runs the detector over the watchlist, drops
everything on a no-entry day or when the risk gate is closed, applies the
per-symbol alert cooldown, builds a trade setup for each survivor and hands it
to the notifier.
"""

import logging
import math
from datetime import date, datetime, timezone
from typing import Optional, Protocol

from tradescout.config import Settings, settings as default_settings
from tradescout.engine.cooldown import AlertCooldown
from tradescout.schemas.signal import OpportunitySignal, TradeSetup
from tradescout.services import statistics
from tradescout.services.anomaly_detector import AnomalyDetector
from tradescout.services.risk_gate import RiskGate
from tradescout.utils.dates import is_friday, today_in

logger = logging.getLogger(__name__)

_orchestrator: Optional["OpportunityOrchestrator"] = None


class Notifier(Protocol):
    def send_opportunity_alert(self, signal: OpportunitySignal, setup: TradeSetup): ...


class OpportunityOrchestrator:
    def __init__(
        self,
        detector: AnomalyDetector,
        risk_gate: RiskGate,
        cooldown: AlertCooldown,
        settings: Settings,
        notifier: Notifier | None = None,
    ):
        self.detector = detector
        self.risk_gate = risk_gate
        self.cooldown = cooldown
        self.settings = settings
        self.notifier = notifier

    async def scan_and_alert(self, now: datetime | None = None) -> list[OpportunitySignal]:
        """Run one scan. Returns the signals that passed every filter."""
        now = now or datetime.now(timezone.utc)
        logger.info("Starting opportunity scan")

        opportunities = await self.detector.scan(self.settings.watchlist)
        if not opportunities:
            logger.info("No opportunities found")
            return []

        today = today_in(self.settings.tz, now)
        if not self.passes_rules(today):
            for signal in opportunities:
                logger.debug(f"[{signal.symbol}] Skipping - trading rules")
            return []

        filtered: list[OpportunitySignal] = []
        # Check, dispatch and record under one lock so overlapping scans
        # cannot both alert the same symbol inside the cooldown window
        async with self.cooldown.lock:
            for signal in opportunities:
                if not self.cooldown.should_alert(
                    signal.symbol, now, self.settings.alert_cooldown_minutes
                ):
                    continue

                setup = self.generate_trade_setup(signal)
                if setup is None:
                    continue

                filtered.append(signal)
                self._dispatch(signal, setup, now)

        logger.info(f"{len(filtered)} opportunities passed filters")
        return filtered

    def passes_rules(self, today: date) -> bool:
        """Calendar and risk-limit rules shared by every signal of a scan."""
        if self.settings.no_friday_entries and is_friday(today):
            logger.info("No entries on Fridays")
            return False
        if not self.risk_gate.can_take_new_trade(today):
            logger.info("Risk limits reached")
            return False
        return True

    def _dispatch(self, signal: OpportunitySignal, setup: TradeSetup, now: datetime):
        if not self.settings.alerts_enabled or self.notifier is None:
            return
        try:
            self.notifier.send_opportunity_alert(signal, setup)
        except Exception as e:
            logger.error(f"[{signal.symbol}] Failed to send alert: {e}")
            return
        self.cooldown.record(signal.symbol, now)
        logger.info(f"[{signal.symbol}] Alert sent")

    def position_size_for(self, entry_price: float) -> int:
        """Whole shares affordable with the per-trade dollar budget."""
        if entry_price <= 0:
            return 0
        return math.floor(self.settings.position_size / entry_price)

    def generate_trade_setup(self, signal: OpportunitySignal) -> TradeSetup | None:
        """Concrete entry/target/stop for ``signal``; None when not even one share fits the budget."""
        entry = signal.current_price
        size = self.position_size_for(entry)
        if size <= 0:
            logger.warning(
                f"[{signal.symbol}] Price ${entry:.2f} exceeds position budget "
                f"${self.settings.position_size:.2f}, skipping"
            )
            return None

        target_gain = round(self.settings.target_profit_per_trade / size, 2)
        stop_loss = round(self.settings.stop_loss_per_trade / size, 2)

        return TradeSetup(
            symbol=signal.symbol,
            entry_price=entry,
            target_price=round(entry + target_gain, 2),
            stop_price=round(entry - stop_loss, 2),
            position_size=size,
            risk_amount=self.settings.stop_loss_per_trade,
            profit_target=self.settings.target_profit_per_trade,
            confidence=signal.confidence,
            reasoning=build_setup_reasoning(signal),
        )


def build_setup_reasoning(signal: OpportunitySignal) -> str:
    ctx = signal.historical_context
    return (
        f"Anomaly detected with {signal.confidence:.0f}% confidence\n"
        "\n"
        "Analysis:\n"
        f"- Price dropped {signal.current_drop_pct:.2f}% from open\n"
        f"- Z-Score: {signal.price_zscore:.2f}σ "
        f"(bottom {statistics.approximate_percentile(signal.price_zscore):.1f}% of days)\n"
        f"- Volume: {signal.current_volume:,} ({signal.volume_zscore:.2f}σ below average)\n"
        "\n"
        "Historical Context:\n"
        f"- Typical drop: {ctx.avg_max_drop_pct:.2f}% ± {ctx.stddev_max_drop_pct:.2f}%\n"
        f"- Average volume: {ctx.avg_volume:,}\n"
        "\n"
        "This appears to be an overreaction on thin trading volume.\n"
        "Manual review required before executing trade."
    )


def init_orchestrator(notifier: Notifier | None = None) -> OpportunityOrchestrator:
    """Build the process-wide orchestrator with a fresh cooldown map."""
    global _orchestrator
    from tradescout.store import get_store

    store = get_store()
    _orchestrator = OpportunityOrchestrator(
        detector=AnomalyDetector(store, default_settings),
        risk_gate=RiskGate(store, default_settings),
        cooldown=AlertCooldown(),
        settings=default_settings,
        notifier=notifier,
    )
    return _orchestrator


def get_orchestrator() -> OpportunityOrchestrator:
    """Get the orchestrator singleton, creating one without a notifier if needed."""
    if _orchestrator is None:
        return init_orchestrator()
    return _orchestrator
