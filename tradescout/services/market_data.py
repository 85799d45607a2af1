"""Market data fetching.

Quotes and daily history come from Yahoo Finance through ``yfinance``. The
library is synchronous, so every call runs in the default executor to keep the
event loop free.
"""

import asyncio
import logging
import math
from datetime import date, timedelta

import pandas as pd
import yfinance as yf

from tradescout.models.daily_bar import DailyBar
from tradescout.schemas.signal import Quote

logger = logging.getLogger(__name__)


class MarketDataError(Exception):
    """Raised when a quote or history request cannot be served."""


async def fetch_quote(symbol: str) -> Quote:
    """Fetch the current intraday quote for ``symbol``."""
    try:
        return await asyncio.get_running_loop().run_in_executor(None, _fetch_quote_sync, symbol)
    except MarketDataError:
        raise
    except Exception as e:
        raise MarketDataError(f"Quote request failed for {symbol}: {e}") from e


async def fetch_history(symbol: str, start: date, end: date) -> list[DailyBar]:
    """Fetch daily bars for ``symbol`` between ``start`` and ``end`` inclusive, oldest first."""
    try:
        df = await asyncio.get_running_loop().run_in_executor(
            None, _fetch_history_sync, symbol, start, end
        )
    except Exception as e:
        raise MarketDataError(f"History request failed for {symbol}: {e}") from e

    bars = parse_history(symbol, df)
    if not bars:
        raise MarketDataError(f"No data returned for {symbol}")
    return bars


# ---------------------------------------------------------------------------
# Blocking helpers (executor side)
# ---------------------------------------------------------------------------

def _fetch_quote_sync(symbol: str) -> Quote:
    info = yf.Ticker(symbol).fast_info
    volume = _safe_float(info.last_volume)
    return Quote(
        symbol=symbol,
        price=_safe_float(info.last_price),
        open=_safe_float(info.open),
        day_high=_safe_float(info.day_high),
        day_low=_safe_float(info.day_low),
        volume=int(volume) if volume is not None else None,
    )


def _fetch_history_sync(symbol: str, start: date, end: date) -> pd.DataFrame:
    # yfinance treats ``end`` as exclusive
    return yf.Ticker(symbol).history(
        start=start.isoformat(),
        end=(end + timedelta(days=1)).isoformat(),
        interval="1d",
        auto_adjust=False,
    )


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_history(symbol: str, df: pd.DataFrame | None) -> list[DailyBar]:
    """Convert a yfinance history frame into DailyBar rows, oldest first.

    Rows with a missing price are dropped; a missing volume counts as 0.
    """
    if df is None or df.empty:
        return []

    required = ["Open", "High", "Low", "Close"]
    missing = [c for c in required if c not in df.columns]
    if missing:
        logger.error(f"[{symbol}] History frame missing columns: {missing}")
        return []

    frame = df.copy()
    for column in required:
        frame[column] = pd.to_numeric(frame[column], errors="coerce")
    frame = frame.dropna(subset=required).sort_index()

    volumes = pd.to_numeric(
        frame["Volume"] if "Volume" in frame.columns else pd.Series(0, index=frame.index),
        errors="coerce",
    ).fillna(0)

    bars = []
    for ts, row in frame.iterrows():
        bars.append(DailyBar(
            symbol=symbol,
            trade_date=pd.Timestamp(ts).date(),
            open_price=round(float(row["Open"]), 4),
            high_price=round(float(row["High"]), 4),
            low_price=round(float(row["Low"]), 4),
            close_price=round(float(row["Close"]), 4),
            volume=int(volumes.loc[ts]),
        ))
    return bars


def _safe_float(value) -> float | None:
    """Return None for missing, NaN or infinite values."""
    if value is None:
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f
