#!/usr/bin/env python3
"""Copy a TradeScout SQLite database into PostgreSQL.

Usage:
    python scripts/migrate_sqlite_to_pg.py <sqlite_path> <postgres_url>

Target tables are created from the SQLModel metadata and emptied before the
copy, so the script can be re-run against the same database.
"""

import sys
from pathlib import Path

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Connection, Engine

# Bars before derived metrics, trades before the reports built from them
TABLE_ORDER = [
    "daily_bar",
    "volatility_metrics",
    "trade",
    "performance_metrics",
]


def _prepare_target(pg_url: str) -> Engine:
    from sqlmodel import SQLModel

    import tradescout.models  # noqa: F401  (populate metadata)

    dst = create_engine(pg_url)
    SQLModel.metadata.create_all(dst)
    return dst


def _reset_id_sequence(conn: Connection, table_name: str, max_id: int):
    seq_name = f"{table_name}_id_seq"
    try:
        # Savepoint so a missing sequence does not roll back the copied rows
        with conn.begin_nested():
            conn.execute(text("SELECT setval(:seq, :val)"), {"seq": seq_name, "val": max_id})
    except Exception as e:
        print(f"  WARN {table_name}: sequence {seq_name} not reset: {e}")


def copy_table(src: Engine, dst: Engine, table_name: str) -> int:
    """Replace ``table_name`` in ``dst`` with the rows of ``src``. Returns the row count."""
    with src.connect() as src_conn:
        rows = [dict(r) for r in src_conn.execute(text(f'SELECT * FROM "{table_name}"')).mappings()]
    if not rows:
        return 0

    columns = list(rows[0])
    insert_sql = 'INSERT INTO "{}" ({}) VALUES ({})'.format(
        table_name,
        ", ".join(f'"{c}"' for c in columns),
        ", ".join(f":{c}" for c in columns),
    )

    with dst.connect() as dst_conn:
        dst_conn.execute(text(f'DELETE FROM "{table_name}"'))
        dst_conn.execute(text(insert_sql), rows)
        ids = [r["id"] for r in rows if r.get("id") is not None]
        if ids:
            _reset_id_sequence(dst_conn, table_name, max(ids))
        dst_conn.commit()
    return len(rows)


def migrate(sqlite_path: str, pg_url: str):
    if not Path(sqlite_path).exists():
        print(f"ERROR: SQLite file not found: {sqlite_path}")
        sys.exit(1)

    src = create_engine(f"sqlite:///{sqlite_path}", connect_args={"check_same_thread": False})
    print("Creating PostgreSQL schema...")
    dst = _prepare_target(pg_url)

    src_tables = set(inspect(src).get_table_names())
    dst_tables = set(inspect(dst).get_table_names())

    for table_name in TABLE_ORDER:
        if table_name not in src_tables or table_name not in dst_tables:
            print(f"  SKIP {table_name} (missing on one side)")
            continue
        count = copy_table(src, dst, table_name)
        print(f"  {table_name}: {count} rows copied")

    print("\nMigration complete!")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)
    migrate(sys.argv[1], sys.argv[2])
