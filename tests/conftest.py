"""Shared fixtures: required settings, an in-memory store and trade builders."""

import os

# Detection thresholds are required settings; provide them before any import
# of tradescout.config builds the module-level Settings.
os.environ.setdefault("TRADESCOUT_MIN_CONFIDENCE", "50")
os.environ.setdefault("TRADESCOUT_MIN_PRICE_ZSCORE", "-2.0")
os.environ.setdefault("TRADESCOUT_MIN_VOLUME_ZSCORE", "-1.0")
os.environ.setdefault("TRADESCOUT_DATABASE_URL", "sqlite://")

from datetime import date

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from tradescout.config import Settings
from tradescout.database import create_db_and_tables
from tradescout.models.trade import ExitReason, Trade, close_trade, open_trade
from tradescout.models.volatility_metrics import VolatilityMetrics
from tradescout.store import Store


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine) -> Store:
    return Store(engine)


@pytest.fixture
def make_settings():
    """Build Settings with test-friendly defaults; keyword overrides win."""
    def _make(**overrides) -> Settings:
        values = {
            "min_confidence": 50.0,
            "min_price_zscore": -2.0,
            "min_volume_zscore": -1.0,
            "watchlist": ["ACME"],
            "request_delay_ms": 0,
            "trading_timezone": "America/New_York",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def add_trade(store):
    """Persist a trade; closed when ``pnl`` is given (exit price derived from it)."""
    def _add(
        symbol: str = "ACME",
        entry_date: date = date(2024, 3, 4),
        exit_date: date | None = None,
        pnl: float | None = None,
        entry_price: float = 100.0,
        position_size: int = 10,
    ) -> Trade:
        trade = open_trade(
            symbol=symbol,
            entry_date=entry_date,
            entry_price=entry_price,
            target_price=entry_price + 15,
            stop_price=entry_price - 7.5,
            position_size=position_size,
        )
        if pnl is not None:
            close_trade(
                trade,
                exit_price=entry_price + pnl / position_size,
                reason=ExitReason.MANUAL_EXIT,
                exit_date=exit_date or entry_date,
            )
        return store.add_trade(trade)
    return _add


@pytest.fixture
def make_metrics():
    """ACME baselines: max drop -1.0% ± 0.5%, volume 1,000,000 ± 200,000."""
    def _make(**overrides) -> VolatilityMetrics:
        values = dict(
            symbol="ACME",
            calculation_date=date(2024, 3, 1),
            lookback_days=90,
            avg_daily_range_pct=2.0,
            stddev_daily_range_pct=0.8,
            avg_max_drop_pct=-1.0,
            stddev_max_drop_pct=0.5,
            avg_daily_change_pct=0.0,
            stddev_daily_change_pct=1.2,
            avg_volume=1_000_000,
            stddev_volume=200_000,
        )
        values.update(overrides)
        return VolatilityMetrics(**values)
    return _make
