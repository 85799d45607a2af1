"""APScheduler integration for FastAPI.

Registers the cron jobs: daily maintenance, the period report and the
market-hours opportunity scan. Cron expressions are evaluated in the trading
timezone.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from tradescout.config import settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone=settings.tz)

DAILY_MAINTENANCE_JOB = "daily_maintenance"
PERIOD_REPORT_JOB = "period_report"
OPPORTUNITY_SCAN_JOB = "opportunity_scan"


def _get_trigger(expression: str) -> CronTrigger:
    return CronTrigger.from_crontab(expression, timezone=settings.tz)


def add_cron_job(func, job_id: str, name: str, expression: str):
    """Add or replace a cron job."""
    if scheduler.get_job(job_id):
        scheduler.remove_job(job_id)

    scheduler.add_job(
        func,
        trigger=_get_trigger(expression),
        id=job_id,
        name=name,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=300,
    )
    logger.info(f"Scheduled {job_id} with cron '{expression}'")


def start_scheduler():
    """Register all jobs and start the scheduler."""
    from tradescout.engine.maintenance import (
        run_daily_maintenance,
        run_opportunity_scan,
        run_period_report,
    )

    add_cron_job(
        run_daily_maintenance, DAILY_MAINTENANCE_JOB, "Daily maintenance",
        settings.daily_maintenance_cron,
    )
    add_cron_job(
        run_period_report, PERIOD_REPORT_JOB, "Quarterly report",
        settings.period_report_cron,
    )
    add_cron_job(
        run_opportunity_scan, OPPORTUNITY_SCAN_JOB, "Opportunity scan",
        settings.scan_cron,
    )

    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")


def stop_scheduler():
    """Shut down the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
    logger.info("Scheduler stopped")


def get_scheduler_status() -> dict:
    """Return current scheduler state for the API."""
    jobs = scheduler.get_jobs()
    return {
        "running": scheduler.running,
        "timezone": settings.trading_timezone,
        "job_count": len(jobs),
        "jobs": [
            {
                "id": j.id,
                "name": j.name,
                "next_run": str(j.next_run_time) if getattr(j, "next_run_time", None) else None,
                "trigger": str(j.trigger),
            }
            for j in jobs
        ],
    }
