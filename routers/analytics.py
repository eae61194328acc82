from fastapi import APIRouter, HTTPException, Request
import structlog

from middleware import LoggingRoute
from models.model import AnalyticsData, DashboardStats
from services.analytics_service import AnalyticsService

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Analytics"],
    route_class=LoggingRoute
)

@router.get("/analytics", summary="Prediction analytics", response_model=AnalyticsData)
async def get_analytics(request: Request):
    """Prediction totals, per-type counts and accuracy trend"""
    try:
        analytics_service: AnalyticsService = request.app.state.analytics_service
        return analytics_service.get_analytics()
    except Exception as e:
        logger.error("Failed to compute analytics", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch analytics")

@router.get("/stats", summary="Dashboard statistics", response_model=DashboardStats)
async def get_stats(request: Request):
    """Active alerts, last-24h predictions, high-risk areas and average confidence"""
    try:
        analytics_service: AnalyticsService = request.app.state.analytics_service
        return analytics_service.get_stats()
    except Exception as e:
        logger.error("Failed to compute stats", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch stats")
