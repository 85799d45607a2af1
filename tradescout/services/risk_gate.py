"""Risk gate: trade-count and loss limits checked before any new entry.

Reads trades from the store only. Loss limits count realized pnl of CLOSED
trades; open positions are not marked to market.
"""

import logging
from datetime import date

from tradescout.config import Settings
from tradescout.models.trade import Trade
from tradescout.schemas.performance import RiskDecision
from tradescout.store import Store
from tradescout.utils.dates import month_bounds, today_in, week_bounds

logger = logging.getLogger(__name__)


def _sum_pnl(trades: list[Trade]) -> float:
    return round(sum(t.pnl for t in trades if t.pnl is not None), 2)


def count_consecutive_losses(trades: list[Trade]) -> int:
    """Leading run of losers in ``trades`` (most recent first)."""
    count = 0
    for trade in trades:
        if not trade.is_loser:
            break
        count += 1
    return count


class RiskGate:
    def __init__(self, store: Store, settings: Settings):
        self.store = store
        self.settings = settings

    def evaluate(self, today: date | None = None) -> RiskDecision:
        """Check every limit for ``today`` (defaults to today in the trading timezone)."""
        today = today or today_in(self.settings.tz)
        week_start, week_end = week_bounds(today)
        month_start, month_end = month_bounds(today)

        weekly_trades = self.store.count_trades_entered_between(week_start, week_end)
        monthly_trades = self.store.count_trades_entered_between(month_start, month_end)
        daily_pnl = _sum_pnl(self.store.closed_trades_between(today, today))
        monthly_pnl = _sum_pnl(self.store.closed_trades_between(month_start, month_end))
        consecutive = count_consecutive_losses(
            self.store.recent_closed_trades(limit=self.settings.max_consecutive_losses)
        )

        logger.debug(f"Weekly trades: {weekly_trades} / {self.settings.max_trades_per_week}")
        logger.debug(f"Monthly trades: {monthly_trades} / {self.settings.max_trades_per_month}")

        reasons = []
        if weekly_trades >= self.settings.max_trades_per_week:
            reasons.append("Weekly trade limit reached")
        if monthly_trades >= self.settings.max_trades_per_month:
            reasons.append("Monthly trade limit reached")
        if daily_pnl <= -self.settings.max_daily_loss:
            reasons.append("Daily loss limit reached")
        if monthly_pnl <= -self.settings.max_monthly_loss:
            reasons.append("Monthly loss limit reached")
        if consecutive >= self.settings.max_consecutive_losses:
            reasons.append("Too many consecutive losses")

        return RiskDecision(
            allowed=not reasons,
            as_of_date=today,
            weekly_trades=weekly_trades,
            max_trades_per_week=self.settings.max_trades_per_week,
            monthly_trades=monthly_trades,
            max_trades_per_month=self.settings.max_trades_per_month,
            daily_pnl=daily_pnl,
            monthly_pnl=monthly_pnl,
            consecutive_losses=consecutive,
            reasons=reasons,
        )

    def can_take_new_trade(self, today: date | None = None) -> bool:
        decision = self.evaluate(today)
        if not decision.allowed:
            logger.warning(f"Cannot take new trade: {', '.join(decision.reasons)}")
        return decision.allowed

    def risk_status(self, today: date | None = None) -> str:
        """Human-readable summary used by the bot and the CLI."""
        d = self.evaluate(today)
        return (
            "Risk Management Status\n"
            f"Weekly Trades: {d.weekly_trades} / {d.max_trades_per_week}\n"
            f"Monthly Trades: {d.monthly_trades} / {d.max_trades_per_month}\n"
            f"Daily P&L: ${d.daily_pnl:,.2f}\n"
            f"Monthly P&L: ${d.monthly_pnl:,.2f}\n"
            f"Consecutive Losses: {d.consecutive_losses}\n"
            f"Can Trade: {'YES' if d.allowed else 'NO'}"
        )
