from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import List, Optional
import structlog

from middleware import LoggingRoute
from models.model import Alert, AlertCreate, AlertUpdate
from utils.dependencies import get_storage, verify_api_key, rate_limit

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/alerts",
    tags=["Alerts"],
    route_class=LoggingRoute
)

@router.get("", summary="List alerts", response_model=List[Alert])
async def get_alerts(
    request: Request,
    active: Optional[bool] = Query(None, description="Only active (true) or inactive (false) alerts")
):
    """All alerts, most recent first"""
    try:
        alerts = get_storage(request.app).get_all_alerts()
        if active is not None:
            alerts = [alert for alert in alerts if alert.is_active == active]
        return alerts
    except Exception as e:
        logger.error("Failed to fetch alerts", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch alerts")

@router.get("/{alert_id}", summary="Get alert by ID", response_model=Alert)
async def get_alert(request: Request, alert_id: str):
    try:
        alert = get_storage(request.app).get_alert(alert_id)
        if not alert:
            raise HTTPException(status_code=404, detail="Alert not found")
        return alert
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to fetch alert", alert_id=alert_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch alert")

@router.post("", summary="Create alert", response_model=Alert)
async def create_alert(
    request: Request,
    alert_data: AlertCreate,
    _: bool = Depends(rate_limit),
    api_key: bool = Depends(verify_api_key)
):
    try:
        alert = get_storage(request.app).create_alert(alert_data)
        logger.info("Alert created", alert_id=alert.id, disaster_type=alert.disaster_type, severity=alert.severity)
        return alert
    except Exception as e:
        logger.error("Alert creation failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create alert")

@router.patch("/{alert_id}", summary="Update alert", response_model=Alert)
async def update_alert(
    request: Request,
    alert_id: str,
    update_data: AlertUpdate,
    _: bool = Depends(rate_limit),
    api_key: bool = Depends(verify_api_key)
):
    """Merge the supplied fields onto an existing alert"""
    try:
        alert = get_storage(request.app).update_alert(alert_id, update_data)
        if not alert:
            raise HTTPException(status_code=404, detail="Alert not found")
        logger.info("Alert updated", alert_id=alert_id, fields=sorted(update_data.changes()))
        return alert
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Alert update failed", alert_id=alert_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update alert")

@router.delete("/{alert_id}", summary="Delete alert")
async def delete_alert(
    request: Request,
    alert_id: str,
    _: bool = Depends(rate_limit),
    api_key: bool = Depends(verify_api_key)
):
    try:
        if not get_storage(request.app).delete_alert(alert_id):
            raise HTTPException(status_code=404, detail="Alert not found")
        logger.info("Alert deleted", alert_id=alert_id)
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Alert deletion failed", alert_id=alert_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete alert")
