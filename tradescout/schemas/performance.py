"""Result types for performance tracking and risk gating."""

from dataclasses import dataclass, field
from datetime import date

from tradescout.models.performance_metrics import PerformanceMetrics
from tradescout.models.trade import Trade


@dataclass
class PerformanceSnapshot:
    """Year-to-date view over every closed trade."""
    as_of_date: date
    current_capital: float
    total_pnl: float
    return_percent: float
    total_trades: int
    open_trades: int
    win_rate: float
    on_pace_for_target: bool
    projected_annual: float
    status: str
    status_emoji: str


@dataclass
class TargetAnalysis:
    on_pace: bool
    projected_annual_return: float
    needed_monthly_return: float
    assessment: str


@dataclass
class PeriodReport:
    metrics: PerformanceMetrics
    trades: list[Trade]
    recommendations: list[str]
    target_analysis: TargetAnalysis


@dataclass
class RiskDecision:
    """Outcome of the risk gate. ``reasons`` is empty when allowed."""
    allowed: bool
    as_of_date: date
    weekly_trades: int
    max_trades_per_week: int
    monthly_trades: int
    max_trades_per_month: int
    daily_pnl: float
    monthly_pnl: float
    consecutive_losses: int
    reasons: list[str] = field(default_factory=list)
