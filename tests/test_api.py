"""Tests for the HTTP routes with dependency overrides."""

from datetime import date
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from tradescout.api import deps
from tradescout.engine.cooldown import AlertCooldown
from tradescout.engine.maintenance import MaintenanceService
from tradescout.engine.opportunity import OpportunityOrchestrator
from tradescout.main import app
from tradescout.models.performance_metrics import PeriodType
from tradescout.schemas.signal import Quote
from tradescout.services.anomaly_detector import AnomalyDetector
from tradescout.services.market_data import MarketDataError
from tradescout.services.performance import PerformanceTracker
from tradescout.services.risk_gate import RiskGate

WEDNESDAY = date(2024, 3, 6)


@pytest.fixture
def api_settings(make_settings):
    return make_settings(no_friday_entries=False, watchlist=["ACME", "FLAT"])


@pytest.fixture
def fetch_quote():
    quotes = {
        "ACME": Quote(symbol="ACME", price=96.0, open=100.0, day_high=100.2, day_low=95.8, volume=500_000),
        "FLAT": Quote(symbol="FLAT", price=100.1, open=100.0, volume=1_000_000),
    }

    async def _fetch(symbol):
        if symbol not in quotes:
            raise MarketDataError(f"No data returned for {symbol}")
        return quotes[symbol]
    return _fetch


@pytest.fixture
def client(store, api_settings, fetch_quote, make_metrics):
    store.save_volatility_metrics(make_metrics())
    store.save_volatility_metrics(make_metrics(symbol="FLAT"))

    orchestrator = OpportunityOrchestrator(
        detector=AnomalyDetector(store, api_settings, fetch_quote),
        risk_gate=RiskGate(store, api_settings),
        cooldown=AlertCooldown(),
        settings=api_settings,
        notifier=None,
    )
    app.dependency_overrides[deps.get_store] = lambda: store
    app.dependency_overrides[deps.get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[deps.get_risk_gate] = lambda: RiskGate(store, api_settings)
    app.dependency_overrides[deps.get_performance_tracker] = lambda: PerformanceTracker(store, api_settings)
    maintenance = MaintenanceService(
        store, api_settings, fetch_quote=fetch_quote, fetch_history=AsyncMock(return_value=[]),
    )
    maintenance._today = lambda: WEDNESDAY
    app.dependency_overrides[deps.get_maintenance_service] = lambda: maintenance
    yield TestClient(app)
    app.dependency_overrides.clear()


NEW_TRADE = {
    "symbol": "acme",
    "entry_date": "2024-03-04",
    "entry_price": 96.0,
    "target_price": 98.88,
    "stop_price": 94.56,
    "position_size": 52,
}


# ---------------------------------------------------------------------------
# 1. Trades
# ---------------------------------------------------------------------------

class TestTradesApi:
    def test_open_close_flow(self, client):
        created = client.post("/api/trades", json=NEW_TRADE)
        assert created.status_code == 201
        trade_id = created.json()["id"]
        assert created.json()["symbol"] == "ACME"
        assert created.json()["status"] == "OPEN"

        closed = client.post(
            f"/api/trades/{trade_id}/close",
            json={"exit_price": 98.88, "exit_reason": "TARGET_HIT", "exit_date": "2024-03-06"},
        )
        assert closed.status_code == 200
        assert closed.json()["pnl"] == pytest.approx(149.76)
        assert closed.json()["status"] == "CLOSED"

        again = client.post(f"/api/trades/{trade_id}/close", json={"exit_price": 99.0})
        assert again.status_code == 409

        cancel = client.post(f"/api/trades/{trade_id}/cancel")
        assert cancel.status_code == 409

        listed = client.get("/api/trades", params={"status": "CLOSED"})
        assert [t["id"] for t in listed.json()] == [trade_id]

    def test_cancel(self, client):
        trade_id = client.post("/api/trades", json=NEW_TRADE).json()["id"]
        response = client.post(f"/api/trades/{trade_id}/cancel", json={"lessons_learned": "gap up"})
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert response.json()["pnl"] is None

    def test_missing_trade(self, client):
        assert client.get("/api/trades/999").status_code == 404
        assert client.post("/api/trades/999/close", json={"exit_price": 1.0}).status_code == 404

    def test_invalid_body(self, client):
        body = dict(NEW_TRADE, stop_price=97.0)
        assert client.post("/api/trades", json=body).status_code == 422

    def test_open_from_signal(self, client):
        response = client.post("/api/trades/from-signal/acme")
        assert response.status_code == 201
        assert response.json()["position_size"] == 52
        assert response.json()["target_price"] == pytest.approx(98.88)

    def test_open_from_non_signal(self, client):
        assert client.post("/api/trades/from-signal/FLAT").status_code == 409


# ---------------------------------------------------------------------------
# 2. Opportunities
# ---------------------------------------------------------------------------

class TestOpportunitiesApi:
    def test_current(self, client):
        response = client.get("/api/opportunities")
        assert response.status_code == 200
        assert [s["symbol"] for s in response.json()] == ["ACME"]

    def test_scan(self, client):
        body = client.post("/api/opportunities/scan").json()
        assert body["opportunities_found"] == 1
        assert body["opportunities"][0]["confidence"] == pytest.approx(75.0)

    def test_single_symbol(self, client):
        body = client.get("/api/opportunities/acme").json()
        assert body["signal"]["is_opportunity"] is True
        assert body["setup"]["position_size"] == 52

        flat = client.get("/api/opportunities/FLAT").json()
        assert flat["signal"]["is_opportunity"] is False
        assert flat["setup"] is None

    def test_single_symbol_errors(self, client):
        assert client.get("/api/opportunities/ZZZZ").status_code == 502


# ---------------------------------------------------------------------------
# 3. Performance, maintenance and system
# ---------------------------------------------------------------------------

class TestOtherRoutes:
    def test_performance_current(self, client):
        body = client.get("/api/performance/current").json()
        assert body["current_capital"] == 10_000.0
        assert body["total_trades"] == 0

    def test_performance_report_and_history(self, client):
        report = client.post("/api/performance/report", params={"period": "MONTHLY"})
        assert report.status_code == 200
        assert report.json()["metrics"]["period_type"] == "MONTHLY"
        assert report.json()["recommendations"]

        history = client.get("/api/performance/history", params={"period": "MONTHLY"}).json()
        assert len(history) == 1

    def test_bad_period(self, client):
        assert client.post("/api/performance/report", params={"period": "DAILY"}).status_code == 422

    def test_report_is_not_saved_by_get(self, client, store):
        assert client.get("/api/performance/report").status_code == 405
        assert store.performance_history(PeriodType.QUARTERLY) == []

    def test_maintenance_update(self, client):
        body = client.post("/api/maintenance/update").json()
        assert body["status"] == "success"
        assert body["updated"] == 2

    def test_health(self, client):
        body = client.get("/api/system/health").json()
        assert body["status"] == "ok"
        assert body["can_trade"] is True
        assert body["risk"]["reasons"] == []

    def test_scheduler_status(self, client):
        body = client.get("/api/system/scheduler").json()
        assert body["running"] is False
