"""SQLModel database engine and session management."""

import logging

from sqlalchemy import inspect
from sqlmodel import SQLModel, create_engine

from tradescout.config import settings

logger = logging.getLogger(__name__)

# SQLite needs check_same_thread=False; PostgreSQL does not
connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args=connect_args,
)


def _run_migrations(bind=None):
    """Run lightweight schema migrations for indexes added after first release."""
    from sqlalchemy import text

    bind = bind or engine
    inspector = inspect(bind)

    # Latest-by-symbol lookups scan volatility_metrics by symbol and date
    if "volatility_metrics" in inspector.get_table_names():
        existing_indexes = inspector.get_indexes("volatility_metrics")
        has_latest_idx = any(
            idx["name"] == "ix_volatility_metrics_symbol_date" for idx in existing_indexes
        )
        if not has_latest_idx:
            logger.info("Migrating: adding ix_volatility_metrics_symbol_date")
            with bind.connect() as conn:
                conn.execute(text(
                    "CREATE INDEX ix_volatility_metrics_symbol_date "
                    "ON volatility_metrics (symbol, calculation_date)"
                ))
                conn.commit()


def create_db_and_tables(bind=None):
    """Create all tables. Called on startup."""
    import tradescout.models  # noqa: F401  (populate metadata)

    bind = bind or engine
    SQLModel.metadata.create_all(bind)
    _run_migrations(bind)
