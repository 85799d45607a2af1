"""Shared API dependencies."""

from tradescout.config import settings
from tradescout.engine.maintenance import MaintenanceService
from tradescout.engine.opportunity import OpportunityOrchestrator, get_orchestrator as _get_orchestrator
from tradescout.services.performance import PerformanceTracker
from tradescout.services.risk_gate import RiskGate
from tradescout.store import Store, get_store as _get_store


def get_store() -> Store:
    return _get_store()


def get_orchestrator() -> OpportunityOrchestrator:
    return _get_orchestrator()


def get_risk_gate() -> RiskGate:
    return RiskGate(_get_store(), settings)


def get_performance_tracker() -> PerformanceTracker:
    return PerformanceTracker(_get_store(), settings)


def get_maintenance_service() -> MaintenanceService:
    return MaintenanceService(_get_store(), settings)
