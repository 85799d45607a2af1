"""Tests for yfinance frame parsing and fetch error mapping."""

from datetime import date
from types import SimpleNamespace
from unittest.mock import patch

import numpy as np
import pandas as pd
import pytest

from tradescout.services import market_data
from tradescout.services.market_data import MarketDataError, parse_history


def _frame() -> pd.DataFrame:
    index = pd.DatetimeIndex(
        ["2024-03-05", "2024-03-04", "2024-03-06"], tz="America/New_York", name="Date"
    )
    return pd.DataFrame(
        {
            "Open": [101.0, 100.0, np.nan],
            "High": [103.0, 102.0, 104.0],
            "Low": [99.5, 98.0, 100.0],
            "Close": [102.0, 101.0, 103.0],
            "Volume": [1500, np.nan, 2000],
        },
        index=index,
    )


class TestParseHistory:
    def test_rows_sorted_and_cleaned(self):
        bars = parse_history("ACME", _frame())

        assert [b.trade_date for b in bars] == [date(2024, 3, 4), date(2024, 3, 5)]
        assert bars[0].volume == 0
        assert bars[1].open_price == 101.0
        assert all(b.symbol == "ACME" for b in bars)

    def test_empty_and_missing_columns(self):
        assert parse_history("ACME", None) == []
        assert parse_history("ACME", pd.DataFrame()) == []
        assert parse_history("ACME", _frame().drop(columns=["Low"])) == []


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_history_empty_raises(self):
        with patch.object(market_data, "_fetch_history_sync", return_value=pd.DataFrame()):
            with pytest.raises(MarketDataError):
                await market_data.fetch_history("ACME", date(2024, 1, 1), date(2024, 3, 1))

    @pytest.mark.asyncio
    async def test_fetch_quote_wraps_errors(self):
        with patch.object(market_data, "_fetch_quote_sync", side_effect=KeyError("lastPrice")):
            with pytest.raises(MarketDataError):
                await market_data.fetch_quote("ACME")

    def test_quote_without_volume_is_incomplete(self):
        info = SimpleNamespace(
            last_price=96.0, open=100.0, day_high=100.5, day_low=95.5, last_volume=float("nan"),
        )
        with patch.object(market_data.yf, "Ticker") as ticker:
            ticker.return_value.fast_info = info
            quote = market_data._fetch_quote_sync("ACME")

        assert quote.volume is None
        assert quote.is_complete is False
