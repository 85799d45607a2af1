"""Volatility metrics builder.

Turns a window of daily bars for one symbol into the mean/stddev baselines the
anomaly detector compares live quotes against.
"""

from datetime import date
from typing import Sequence

import pandas as pd

from tradescout.models.daily_bar import DailyBar
from tradescout.models.volatility_metrics import VolatilityMetrics
from tradescout.services import statistics


def bars_to_frame(bars: Sequence[DailyBar]) -> pd.DataFrame:
    """Daily bars as a date-indexed frame with the three derived percentages."""
    if not bars:
        return pd.DataFrame(
            columns=["daily_range_pct", "max_drop_pct", "daily_change_pct", "volume"]
        )

    df = pd.DataFrame(
        [
            {
                "trade_date": b.trade_date,
                "daily_range_pct": b.daily_range_pct,
                "max_drop_pct": b.max_drop_pct,
                "daily_change_pct": b.daily_change_pct,
                "volume": b.volume,
            }
            for b in bars
        ]
    )
    return df.set_index("trade_date").sort_index()


def build_volatility_metrics(
    symbol: str,
    bars: Sequence[DailyBar],
    lookback_days: int,
    calculation_date: date,
) -> VolatilityMetrics | None:
    """Aggregate ``bars`` into an unsaved VolatilityMetrics row.

    Returns None when the window is empty.
    """
    df = bars_to_frame(bars)
    if df.empty:
        return None

    ranges = df["daily_range_pct"].tolist()
    drops = df["max_drop_pct"].tolist()
    changes = df["daily_change_pct"].tolist()
    volumes = df["volume"].astype(float).tolist()

    return VolatilityMetrics(
        symbol=symbol,
        calculation_date=calculation_date,
        lookback_days=lookback_days,
        avg_daily_range_pct=statistics.mean(ranges),
        stddev_daily_range_pct=statistics.stddev(ranges),
        avg_max_drop_pct=statistics.mean(drops),
        stddev_max_drop_pct=statistics.stddev(drops),
        avg_daily_change_pct=statistics.mean(changes),
        stddev_daily_change_pct=statistics.stddev(changes),
        avg_volume=int(statistics.mean(volumes)),
        stddev_volume=int(statistics.stddev(volumes)),
    )
