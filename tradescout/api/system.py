"""System API: health check and scheduler status."""

from fastapi import APIRouter, Depends

from tradescout.api.deps import get_risk_gate, get_store
from tradescout.services.risk_gate import RiskGate
from tradescout.store import Store

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check(
    store: Store = Depends(get_store),
    risk_gate: RiskGate = Depends(get_risk_gate),
):
    decision = risk_gate.evaluate()
    return {
        "status": "ok",
        "service": "TradeScout",
        "date": decision.as_of_date,
        "stocks_tracked": len(store.distinct_symbols()),
        "can_trade": decision.allowed,
        "risk": decision,
    }


@router.get("/scheduler")
def scheduler_status():
    """Current scheduler state with job details."""
    from tradescout.engine.scheduler import get_scheduler_status
    return get_scheduler_status()
