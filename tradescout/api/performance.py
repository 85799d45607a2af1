"""Performance API: snapshot, period reports and saved history."""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from tradescout.api.deps import get_performance_tracker
from tradescout.models.performance_metrics import PeriodType
from tradescout.schemas.trade import TradeRead
from tradescout.services.performance import PerformanceTracker, format_executive_summary

router = APIRouter(prefix="/api/performance", tags=["performance"])


@router.get("/current")
def current_performance(tracker: PerformanceTracker = Depends(get_performance_tracker)):
    return tracker.snapshot()


@router.post("/report")
def period_report(
    period: PeriodType = PeriodType.QUARTERLY,
    tracker: PerformanceTracker = Depends(get_performance_tracker),
):
    """Generate (and persist) the report for the current period."""
    report = tracker.generate_period_report(period)
    return {
        "metrics": report.metrics,
        "trades": [TradeRead.model_validate(t) for t in report.trades],
        "recommendations": report.recommendations,
        "target_analysis": asdict(report.target_analysis),
        "summary": format_executive_summary(report),
    }


@router.get("/history")
def performance_history(
    period: PeriodType = PeriodType.QUARTERLY,
    tracker: PerformanceTracker = Depends(get_performance_tracker),
):
    return tracker.history(period)
