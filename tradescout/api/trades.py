"""Trade journal API: open, list, close and cancel trades."""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from tradescout.api.deps import get_orchestrator, get_store
from tradescout.config import settings
from tradescout.engine.opportunity import OpportunityOrchestrator
from tradescout.models.trade import (
    Trade,
    TradeStateError,
    TradeStatus,
    cancel_trade,
    close_trade,
    open_trade,
)
from tradescout.schemas.trade import TradeCancel, TradeClose, TradeCreate, TradeRead
from tradescout.services.market_data import MarketDataError
from tradescout.store import Store
from tradescout.utils.dates import today_in

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trades", tags=["trades"])


def _get_or_404(store: Store, trade_id: int) -> Trade:
    trade = store.get_trade(trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    return trade


@router.get("", response_model=list[TradeRead])
def list_trades(
    symbol: str | None = None,
    status: TradeStatus | None = None,
    limit: int = 50,
    offset: int = 0,
    store: Store = Depends(get_store),
):
    return store.list_trades(symbol=symbol, status=status, limit=limit, offset=offset)


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(trade_id: int, store: Store = Depends(get_store)):
    return _get_or_404(store, trade_id)


@router.post("", response_model=TradeRead, status_code=201)
def create_trade(body: TradeCreate, store: Store = Depends(get_store)):
    trade = open_trade(
        symbol=body.symbol,
        entry_date=body.entry_date or today_in(settings.tz),
        entry_price=body.entry_price,
        target_price=body.target_price,
        stop_price=body.stop_price,
        position_size=body.position_size,
        confidence_score=body.confidence_score,
        entry_reasoning=body.entry_reasoning,
    )
    trade = store.add_trade(trade)
    logger.info(f"[{trade.symbol}] Opened trade {trade.id}: {trade.position_size} @ {trade.entry_price}")
    return trade


@router.post("/from-signal/{symbol}", response_model=TradeRead, status_code=201)
async def create_trade_from_signal(
    symbol: str,
    store: Store = Depends(get_store),
    orchestrator: OpportunityOrchestrator = Depends(get_orchestrator),
):
    """Analyze ``symbol`` now and open a trade from its setup if it is an opportunity."""
    symbol = symbol.strip().upper()
    try:
        signal = await orchestrator.detector.analyze_symbol(symbol)
    except (MarketDataError, asyncio.TimeoutError) as e:
        raise HTTPException(status_code=502, detail=f"Quote unavailable for {symbol}: {e}")
    if signal is None or not signal.is_opportunity:
        raise HTTPException(status_code=409, detail=f"{symbol} is not currently an opportunity")

    setup = orchestrator.generate_trade_setup(signal)
    if setup is None:
        raise HTTPException(status_code=409, detail=f"{symbol} price exceeds the position budget")

    trade = store.add_trade(open_trade(
        symbol=setup.symbol,
        entry_date=today_in(settings.tz),
        entry_price=setup.entry_price,
        target_price=setup.target_price,
        stop_price=setup.stop_price,
        position_size=setup.position_size,
        confidence_score=setup.confidence,
        entry_reasoning=setup.reasoning[:1000],
    ))
    logger.info(f"[{trade.symbol}] Opened trade {trade.id} from live signal")
    return trade


@router.post("/{trade_id}/close", response_model=TradeRead)
def close(trade_id: int, body: TradeClose, store: Store = Depends(get_store)):
    trade = _get_or_404(store, trade_id)
    try:
        close_trade(
            trade,
            exit_price=body.exit_price,
            reason=body.exit_reason,
            exit_date=body.exit_date or today_in(settings.tz),
            lessons_learned=body.lessons_learned,
        )
    except TradeStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    trade = store.save_trade(trade)
    logger.info(f"[{trade.symbol}] Closed trade {trade.id}: pnl {trade.pnl}")
    return trade


@router.post("/{trade_id}/cancel", response_model=TradeRead)
def cancel(trade_id: int, body: TradeCancel | None = None, store: Store = Depends(get_store)):
    trade = _get_or_404(store, trade_id)
    try:
        cancel_trade(trade, lessons_learned=body.lessons_learned if body else None)
    except TradeStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    trade = store.save_trade(trade)
    logger.info(f"[{trade.symbol}] Cancelled trade {trade.id}")
    return trade
