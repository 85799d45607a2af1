"""VolatilityMetrics model: rolling-window baselines the detector compares against."""

from datetime import date, datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class VolatilityMetrics(SQLModel, table=True):
    __tablename__ = "volatility_metrics"
    __table_args__ = (
        UniqueConstraint(
            "symbol", "calculation_date", "lookback_days", name="uk_volatility_metrics"
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    symbol: str = Field(index=True, max_length=10)
    calculation_date: date
    lookback_days: int

    # Price metrics (percent of open)
    avg_daily_range_pct: float = 0.0
    stddev_daily_range_pct: float = 0.0
    avg_max_drop_pct: float = 0.0
    stddev_max_drop_pct: float = 0.0
    avg_daily_change_pct: float = 0.0
    stddev_daily_change_pct: float = 0.0

    # Volume metrics (shares)
    avg_volume: int = 0
    stddev_volume: int = 0

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def copy_stats_from(self, other: "VolatilityMetrics") -> None:
        """Overwrite the aggregate fields with those of another calculation."""
        for name in (
            "avg_daily_range_pct",
            "stddev_daily_range_pct",
            "avg_max_drop_pct",
            "stddev_max_drop_pct",
            "avg_daily_change_pct",
            "stddev_daily_change_pct",
            "avg_volume",
            "stddev_volume",
        ):
            setattr(self, name, getattr(other, name))
