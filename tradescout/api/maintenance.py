"""Maintenance API: initial history load and manual daily refresh."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from tradescout.api.deps import get_maintenance_service
from tradescout.engine.maintenance import MaintenanceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/maintenance", tags=["maintenance"])


@router.post("/initialize")
async def initialize_data(service: MaintenanceService = Depends(get_maintenance_service)):
    logger.info("Starting initial data load")
    try:
        result = await service.load_initial_data()
    except Exception as e:
        logger.error(f"Failed to initialize data: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "success", "message": "Historical data loaded successfully", **result}


@router.post("/update")
async def update_data(service: MaintenanceService = Depends(get_maintenance_service)):
    logger.info("Starting manual data update")
    try:
        result = await service.update_todays_data()
        computed = service.calculate_metrics_for_all()
    except Exception as e:
        logger.error(f"Failed to update data: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "status": "success",
        "message": "Data updated successfully",
        **result,
        "metrics_computed": computed,
    }
