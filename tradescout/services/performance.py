"""Performance tracking: year-to-date snapshot, period reports and recommendations.

Returns are non-compounding: every percentage is measured against the
configured initial capital.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Sequence

from tradescout.config import Settings
from tradescout.models.performance_metrics import PerformanceMetrics, PeriodType
from tradescout.models.trade import Trade
from tradescout.schemas.performance import PerformanceSnapshot, PeriodReport, TargetAnalysis
from tradescout.services import statistics
from tradescout.store import Store
from tradescout.utils.constants import (
    EXCELLENT_WIN_RATE,
    MIN_PROFIT_FACTOR,
    MIN_WIN_LOSS_RATIO,
    MIN_WIN_RATE,
    PERIODS_PER_YEAR,
    STRONG_PROFIT_FACTOR,
    STRONG_WIN_RATE,
    TRADE_FREQUENCY_BOUNDS,
)
from tradescout.utils.dates import period_bounds, quarter_index, today_in

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Projections and status labels
# ---------------------------------------------------------------------------

def project_annual_from_day_of_year(return_percent: float, as_of: date) -> float:
    """Extrapolate a year-to-date return to 365 days."""
    day_of_year = as_of.timetuple().tm_yday
    return return_percent / day_of_year * 365.0


def project_annual_from_period(return_percent: float, period_type: PeriodType) -> float:
    """Extrapolate one period's return linearly (quarterly x 4)."""
    return return_percent * PERIODS_PER_YEAR[period_type]


def determine_status(return_percent: float, win_rate: float, on_pace: bool) -> str:
    if on_pace and win_rate >= EXCELLENT_WIN_RATE:
        return "Excellent - On target with strong win rate"
    if on_pace:
        return "Good - On pace for annual target"
    if return_percent > 0:
        return "Fair - Profitable but below target"
    return "Needs Improvement - Below expectations"


def status_emoji(on_pace: bool, win_rate: float) -> str:
    if on_pace and win_rate >= EXCELLENT_WIN_RATE:
        return "🟢"
    if on_pace or win_rate >= MIN_WIN_RATE:
        return "🟡"
    return "🔴"


def _return_percent(pnl: float, capital: float) -> float:
    return round(pnl / capital * 100.0, 2)


def _period_label(period_type: PeriodType) -> str:
    return {
        PeriodType.WEEKLY: "weekly",
        PeriodType.MONTHLY: "monthly",
        PeriodType.QUARTERLY: "quarterly",
        PeriodType.ANNUAL: "annual",
    }[period_type]


class PerformanceTracker:
    def __init__(self, store: Store, settings: Settings):
        self.store = store
        self.settings = settings

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self, as_of: date | None = None) -> PerformanceSnapshot:
        """Performance over every closed trade, as of ``as_of``."""
        as_of = as_of or today_in(self.settings.tz)
        closed = self.store.all_closed_trades()

        total_pnl = round(sum(t.pnl for t in closed if t.pnl is not None), 2)
        initial = self.settings.initial_capital
        return_percent = _return_percent(total_pnl, initial)

        winners = sum(1 for t in closed if t.is_winner)
        win_rate = winners / len(closed) * 100.0 if closed else 0.0

        day_of_year = as_of.timetuple().tm_yday
        expected = self.settings.annual_target_percent / 365.0 * day_of_year
        on_pace = return_percent >= expected

        return PerformanceSnapshot(
            as_of_date=as_of,
            current_capital=round(initial + total_pnl, 2),
            total_pnl=total_pnl,
            return_percent=return_percent,
            total_trades=len(closed),
            open_trades=self.store.count_open_trades(),
            win_rate=win_rate,
            on_pace_for_target=on_pace,
            projected_annual=project_annual_from_day_of_year(return_percent, as_of),
            status=determine_status(return_percent, win_rate, on_pace),
            status_emoji=status_emoji(on_pace, win_rate),
        )

    # ------------------------------------------------------------------
    # Period reports
    # ------------------------------------------------------------------

    def period_target_percent(self, period_type: PeriodType) -> float:
        """Return target for one period of ``period_type``."""
        if period_type == PeriodType.QUARTERLY:
            return self.settings.quarterly_target_percent
        if period_type == PeriodType.ANNUAL:
            return self.settings.annual_target_percent
        return self.settings.annual_target_percent / PERIODS_PER_YEAR[period_type]

    def calculate_period_metrics(
        self,
        period_type: PeriodType,
        start: date,
        end: date,
        trades: Sequence[Trade],
    ) -> PerformanceMetrics:
        """Aggregate closed ``trades`` into an unsaved metrics row."""
        initial = self.settings.initial_capital
        metrics = PerformanceMetrics(
            period_type=period_type,
            period_start=start,
            period_end=end,
            starting_capital=initial,
            ending_capital=initial,
        )
        if not trades:
            return metrics

        winners = [t for t in trades if t.is_winner]
        losers = [t for t in trades if t.is_loser]
        pnls = [t.pnl for t in trades if t.pnl is not None]
        total_pnl = round(sum(pnls), 2)
        return_percent = _return_percent(total_pnl, initial)

        metrics.total_trades = len(trades)
        metrics.winning_trades = len(winners)
        metrics.losing_trades = len(losers)
        metrics.win_rate = len(winners) / len(trades) * 100.0
        metrics.total_pnl = total_pnl
        metrics.ending_capital = round(initial + total_pnl, 2)
        metrics.return_percent = return_percent

        if winners:
            win_pnls = [t.pnl for t in winners]
            metrics.avg_win = round(sum(win_pnls) / len(win_pnls), 2)
            metrics.largest_win = max(win_pnls)
        if losers:
            loss_pnls = [t.pnl for t in losers]
            metrics.avg_loss = round(sum(loss_pnls) / len(loss_pnls), 2)
            metrics.largest_loss = min(loss_pnls)

        total_wins = sum(t.pnl for t in winners)
        total_losses = abs(sum(t.pnl for t in losers))
        if total_losses > 0:
            metrics.profit_factor = round(total_wins / total_losses, 2)

        # Daily returns and equity curve, ordered by exit date
        pnl_by_day: dict[date, float] = defaultdict(float)
        for t in trades:
            if t.pnl is not None and t.exit_date is not None:
                pnl_by_day[t.exit_date] += t.pnl
        days = sorted(pnl_by_day)
        metrics.sharpe_ratio = statistics.sharpe_ratio(
            [pnl_by_day[d] / initial for d in days]
        )
        equity = [initial]
        for d in days:
            equity.append(equity[-1] + pnl_by_day[d])
        drawdown, drawdown_pct = statistics.max_drawdown(equity)
        metrics.max_drawdown = round(drawdown, 2)
        metrics.max_drawdown_percent = round(drawdown_pct, 2)

        metrics.on_pace_for_annual_target = return_percent >= self.period_target_percent(period_type)
        metrics.projected_annual_return = project_annual_from_period(return_percent, period_type)
        return metrics

    def generate_period_report(
        self,
        period_type: PeriodType = PeriodType.QUARTERLY,
        as_of: date | None = None,
    ) -> PeriodReport:
        """Build, persist and return the report for the period containing ``as_of``."""
        as_of = as_of or today_in(self.settings.tz)
        start, end = period_bounds(period_type, as_of)
        logger.info(f"Generating {_period_label(period_type)} report: {start} to {end}")

        trades = self.store.closed_trades_between(start, end)
        metrics = self.calculate_period_metrics(period_type, start, end, trades)
        metrics = self.store.save_performance_metrics(metrics)

        return PeriodReport(
            metrics=metrics,
            trades=trades,
            recommendations=self.generate_recommendations(metrics),
            target_analysis=self.analyze_target_progress(metrics, as_of),
        )

    def generate_recommendations(self, metrics: PerformanceMetrics) -> list[str]:
        recommendations = []

        if metrics.win_rate < MIN_WIN_RATE:
            recommendations.append(
                f"Win rate below target ({MIN_WIN_RATE:.0f}%). "
                "Review entry criteria for quality improvement."
            )
        elif metrics.win_rate > STRONG_WIN_RATE:
            recommendations.append(
                "Excellent win rate! Consider increasing position size if risk allows."
            )

        if metrics.profit_factor is not None:
            if metrics.profit_factor < MIN_PROFIT_FACTOR:
                recommendations.append(
                    f"Profit factor below {MIN_PROFIT_FACTOR}. Focus on letting winners run longer."
                )
            elif metrics.profit_factor > STRONG_PROFIT_FACTOR:
                recommendations.append(
                    "Strong profit factor! Current risk/reward strategy is working well."
                )

        min_trades, max_trades = TRADE_FREQUENCY_BOUNDS[metrics.period_type]
        if metrics.total_trades < min_trades:
            recommendations.append(
                "Below minimum trade frequency. Consider loosening filters slightly."
            )
        elif metrics.total_trades > max_trades:
            recommendations.append("High trade frequency. Ensure quality over quantity.")

        target = self.period_target_percent(metrics.period_type)
        if metrics.return_percent < target:
            gap = target - metrics.return_percent
            recommendations.append(
                f"Behind {_period_label(metrics.period_type)} target by {gap:.1f}%. "
                "Increase position size or trade frequency."
            )

        if metrics.avg_win is not None and metrics.avg_loss is not None:
            ratio = round(metrics.avg_win / abs(metrics.avg_loss), 2)
            if ratio < MIN_WIN_LOSS_RATIO:
                recommendations.append(
                    "Average winner barely exceeds average loser. "
                    "Tighten stops or widen targets."
                )

        if not recommendations:
            recommendations.append("Performance is solid. Continue current strategy.")
        return recommendations

    def analyze_target_progress(
        self, metrics: PerformanceMetrics, as_of: date | None = None
    ) -> TargetAnalysis:
        as_of = as_of or today_in(self.settings.tz)
        annual_target = self.settings.annual_target_percent
        projected = metrics.projected_annual_return
        on_pace = projected >= annual_target

        remaining_quarters = 4 - quarter_index(as_of) - 1
        needed = annual_target - metrics.return_percent
        needed_monthly = needed / (remaining_quarters * 3) if remaining_quarters > 0 else 0.0

        if on_pace:
            assessment = f"✅ On pace! Projected annual return: {projected:.1f}%"
        else:
            assessment = (
                f"⚠️ Behind pace. Need {needed_monthly:.2f}% monthly "
                f"to hit {annual_target:.1f}% target"
            )

        return TargetAnalysis(
            on_pace=on_pace,
            projected_annual_return=projected,
            needed_monthly_return=needed_monthly,
            assessment=assessment,
        )

    def history(self, period_type: PeriodType = PeriodType.QUARTERLY) -> list[PerformanceMetrics]:
        return self.store.performance_history(period_type)


def format_snapshot(snapshot: PerformanceSnapshot) -> str:
    return (
        f"{snapshot.status_emoji} Performance as of {snapshot.as_of_date}\n"
        f"Capital: ${snapshot.current_capital:,.2f}\n"
        f"Return: {snapshot.return_percent:.2f}%\n"
        f"Win Rate: {snapshot.win_rate:.1f}%\n"
        f"Trades: {snapshot.total_trades} closed, {snapshot.open_trades} open\n"
        f"Projected Annual: {snapshot.projected_annual:.2f}%\n"
        f"Status: {snapshot.status}"
    )


def format_executive_summary(report: PeriodReport) -> str:
    m = report.metrics
    top = "\n".join(f"  • {r}" for r in report.recommendations[:3])
    return (
        f"{_period_label(m.period_type).capitalize()} Performance Summary\n"
        f"Period: {m.period_start} to {m.period_end}\n"
        "\n"
        f"Trades: {m.total_trades}\n"
        f"Win Rate: {m.win_rate:.2f}%\n"
        f"Total P&L: ${m.total_pnl:,.2f}\n"
        f"Return: {m.return_percent:.2f}%\n"
        "\n"
        f"Target Assessment: {report.target_analysis.assessment}\n"
        f"Projected Annual: {m.projected_annual_return:.2f}%\n"
        "\n"
        "Top Recommendations:\n"
        f"{top}"
    )
