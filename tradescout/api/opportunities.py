"""Opportunities API: current anomalies, manual scan, single-symbol analysis."""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from tradescout.api.deps import get_orchestrator
from tradescout.engine.opportunity import OpportunityOrchestrator
from tradescout.services.market_data import MarketDataError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/opportunities", tags=["opportunities"])


@router.get("")
async def current_opportunities(orchestrator: OpportunityOrchestrator = Depends(get_orchestrator)):
    """Flagged signals for the watchlist right now. Sends no alerts."""
    return await orchestrator.detector.scan(orchestrator.settings.watchlist)


@router.post("/scan")
async def trigger_scan(orchestrator: OpportunityOrchestrator = Depends(get_orchestrator)):
    logger.info("Manual scan triggered")
    opportunities = await orchestrator.scan_and_alert()
    return {
        "message": "Scan complete",
        "opportunities_found": len(opportunities),
        "opportunities": opportunities,
    }


@router.get("/{symbol}")
async def analyze_symbol(
    symbol: str,
    orchestrator: OpportunityOrchestrator = Depends(get_orchestrator),
):
    """Full analysis of one symbol, with a trade setup when it is an opportunity."""
    symbol = symbol.strip().upper()
    try:
        signal = await orchestrator.detector.analyze_symbol(symbol)
    except MarketDataError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except asyncio.TimeoutError:
        raise HTTPException(status_code=504, detail=f"Quote request timed out for {symbol}")
    if signal is None:
        raise HTTPException(status_code=404, detail=f"No quote or metrics available for {symbol}")

    setup = orchestrator.generate_trade_setup(signal) if signal.is_opportunity else None
    return {"signal": signal, "setup": setup}
