"""Shared constants for statistics, sizing and performance reporting."""

from tradescout.models.performance_metrics import PeriodType

TRADING_DAYS_PER_YEAR = 252
ANNUAL_RISK_FREE_RATE = 0.02
DAILY_RISK_FREE_RATE = ANNUAL_RISK_FREE_RATE / TRADING_DAYS_PER_YEAR

# Confidence scoring (points out of 100)
PRICE_Z_FLOOR = 2.0
PRICE_POINTS_PER_SIGMA = 25.0
MAX_PRICE_POINTS = 50.0
VOLUME_POINTS_PER_SIGMA = 10.0
MAX_VOLUME_POINTS = 30.0
TREND_POINTS_PER_PCT = 2.0
MAX_TREND_POINTS = 20.0

# Linear extrapolation factor from one period's return to a full year
PERIODS_PER_YEAR: dict[PeriodType, int] = {
    PeriodType.WEEKLY: 52,
    PeriodType.MONTHLY: 12,
    PeriodType.QUARTERLY: 4,
    PeriodType.ANNUAL: 1,
}

# Healthy trade-count range per period; outside it a recommendation is made
TRADE_FREQUENCY_BOUNDS: dict[PeriodType, tuple[int, int]] = {
    PeriodType.WEEKLY: (1, 6),
    PeriodType.MONTHLY: (3, 9),
    PeriodType.QUARTERLY: (8, 25),
    PeriodType.ANNUAL: (32, 100),
}

MIN_WIN_RATE = 55.0
STRONG_WIN_RATE = 70.0
MIN_PROFIT_FACTOR = 1.5
STRONG_PROFIT_FACTOR = 2.0
MIN_WIN_LOSS_RATIO = 1.1
EXCELLENT_WIN_RATE = 60.0

# Metrics rows outlive bar retention by this many days
METRICS_RETENTION_GRACE_DAYS = 30
