"""Trading calendar helpers."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from tradescout.models.performance_metrics import PeriodType


def today_in(tz: ZoneInfo, now: datetime | None = None) -> date:
    """Calendar date in ``tz`` at ``now`` (defaults to the current instant)."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).date()


def is_friday(day: date) -> bool:
    return day.weekday() == 4


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def last_trading_day(day: date) -> date:
    """Most recent weekday on or before ``day``."""
    while is_weekend(day):
        day -= timedelta(days=1)
    return day


def week_bounds(day: date) -> tuple[date, date]:
    """Monday..Sunday of the week containing ``day``."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def month_bounds(day: date) -> tuple[date, date]:
    start = day.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)


def quarter_index(day: date) -> int:
    """Zero-based quarter of the year (Jan-Mar = 0)."""
    return (day.month - 1) // 3


def quarter_bounds(day: date) -> tuple[date, date]:
    start = date(day.year, quarter_index(day) * 3 + 1, 1)
    end_month_start = date(day.year, start.month + 2, 1)
    return start, month_bounds(end_month_start)[1]


def year_bounds(day: date) -> tuple[date, date]:
    return date(day.year, 1, 1), date(day.year, 12, 31)


def period_bounds(period_type: PeriodType, day: date) -> tuple[date, date]:
    if period_type == PeriodType.WEEKLY:
        return week_bounds(day)
    if period_type == PeriodType.MONTHLY:
        return month_bounds(day)
    if period_type == PeriodType.QUARTERLY:
        return quarter_bounds(day)
    return year_bounds(day)


def previous_period_bounds(period_type: PeriodType, day: date) -> tuple[date, date]:
    """Bounds of the period that ended just before the one containing ``day``."""
    start, _ = period_bounds(period_type, day)
    return period_bounds(period_type, start - timedelta(days=1))
