"""Database models."""

from tradescout.models.daily_bar import DailyBar
from tradescout.models.volatility_metrics import VolatilityMetrics
from tradescout.models.trade import (
    Trade,
    TradeStatus,
    ExitReason,
    TradeStateError,
    open_trade,
    close_trade,
    cancel_trade,
)
from tradescout.models.performance_metrics import PerformanceMetrics, PeriodType

__all__ = [
    "DailyBar",
    "VolatilityMetrics",
    "Trade",
    "TradeStatus",
    "ExitReason",
    "TradeStateError",
    "open_trade",
    "close_trade",
    "cancel_trade",
    "PerformanceMetrics",
    "PeriodType",
]
