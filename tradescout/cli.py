"""CLI tool for admin operations.

Usage:
    python -m tradescout.cli <command>

Commands:
    init-db      create tables
    initialize   load lookback history for the watchlist and compute metrics
    update       refresh today's bars and recompute metrics
    scan         run one opportunity scan (no alerts are sent)
    report       generate and save the period report [WEEKLY|MONTHLY|QUARTERLY|ANNUAL]
    risk         print the risk gate status
"""

import asyncio
import sys

from tradescout.config import settings
from tradescout.database import create_db_and_tables
from tradescout.models.performance_metrics import PeriodType
from tradescout.utils.logging import setup_logging

COMMANDS = ["init-db", "initialize", "update", "scan", "report", "risk"]


def init_db():
    create_db_and_tables()
    print("Database tables created.")


def initialize():
    from tradescout.engine.maintenance import get_maintenance_service

    result = asyncio.run(get_maintenance_service().load_initial_data())
    print(
        f"Loaded {result['loaded']} symbols ({result['failed']} failed), "
        f"metrics computed for {result['metrics_computed']}."
    )


def update():
    from tradescout.engine.maintenance import get_maintenance_service

    service = get_maintenance_service()
    result = asyncio.run(service.update_todays_data())
    computed = service.calculate_metrics_for_all()
    print(
        f"Updated {result['updated']}, skipped {result['skipped']}, "
        f"failed {result['failed']}; metrics computed for {computed}."
    )


def scan():
    from tradescout.engine.opportunity import init_orchestrator

    orchestrator = init_orchestrator(notifier=None)
    signals = asyncio.run(orchestrator.scan_and_alert())
    if not signals:
        print("No opportunities.")
        return
    for signal in signals:
        print(signal.summary)
        setup = orchestrator.generate_trade_setup(signal)
        if setup:
            print(
                f"  entry ${setup.entry_price:.2f}  target ${setup.target_price:.2f}  "
                f"stop ${setup.stop_price:.2f}  shares {setup.position_size}"
            )


def report(period: str = "QUARTERLY"):
    from tradescout.services.performance import PerformanceTracker, format_executive_summary
    from tradescout.store import get_store

    try:
        period_type = PeriodType(period.upper())
    except ValueError:
        print(f"Unknown period: {period}")
        sys.exit(1)
    result = PerformanceTracker(get_store(), settings).generate_period_report(period_type)
    print(format_executive_summary(result))


def risk():
    from tradescout.services.risk_gate import RiskGate
    from tradescout.store import get_store

    print(RiskGate(get_store(), settings).risk_status())


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m tradescout.cli <command>")
        print(f"Commands: {', '.join(COMMANDS)}")
        sys.exit(1)

    setup_logging()
    command = sys.argv[1]
    if command != "init-db":
        create_db_and_tables()

    if command == "init-db":
        init_db()
    elif command == "initialize":
        initialize()
    elif command == "update":
        update()
    elif command == "scan":
        scan()
    elif command == "report":
        report(*sys.argv[2:3])
    elif command == "risk":
        risk()
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
