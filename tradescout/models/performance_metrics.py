"""PerformanceMetrics model: one aggregate row per reporting period."""

from datetime import date, datetime, timezone
from enum import Enum

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class PeriodType(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"


class PerformanceMetrics(SQLModel, table=True):
    __tablename__ = "performance_metrics"
    __table_args__ = (
        UniqueConstraint("period_type", "period_end", name="uk_performance_metrics_period"),
    )

    id: int | None = Field(default=None, primary_key=True)
    period_type: PeriodType = Field(index=True)
    period_start: date
    period_end: date

    starting_capital: float = 0.0
    ending_capital: float = 0.0

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0

    total_pnl: float = 0.0
    return_percent: float = 0.0
    avg_win: float | None = None
    avg_loss: float | None = None
    largest_win: float | None = None
    largest_loss: float | None = None
    profit_factor: float | None = None  # None when the period has no losers

    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0
    sharpe_ratio: float = 0.0

    on_pace_for_annual_target: bool = False
    projected_annual_return: float = 0.0

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
