from fastapi import APIRouter, Depends, HTTPException, Request
from typing import List
import structlog

from middleware import LoggingRoute
from models.model import EvacuationRoute, RouteRequest
from services.route_service import RouteService
from utils.dependencies import get_storage, verify_api_key, rate_limit

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/routes",
    tags=["Evacuation Routes"],
    route_class=LoggingRoute
)

@router.get("", summary="List evacuation routes", response_model=List[EvacuationRoute])
async def get_routes(request: Request):
    try:
        return get_storage(request.app).get_all_routes()
    except Exception as e:
        logger.error("Failed to fetch routes", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch routes")

@router.get("/alert/{alert_id}", summary="Routes for an alert", response_model=List[EvacuationRoute])
async def get_routes_by_alert(request: Request, alert_id: str):
    try:
        return get_storage(request.app).get_routes_by_alert(alert_id)
    except Exception as e:
        logger.error("Failed to fetch routes", alert_id=alert_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch routes")

@router.get("/{route_id}", summary="Get route by ID", response_model=EvacuationRoute)
async def get_route(request: Request, route_id: str):
    try:
        route = get_storage(request.app).get_route(route_id)
        if not route:
            raise HTTPException(status_code=404, detail="Route not found")
        return route
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to fetch route", route_id=route_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch route")

@router.post("", summary="Generate evacuation routes for an alert", response_model=List[EvacuationRoute])
async def create_routes(
    request: Request,
    req: RouteRequest,
    _: bool = Depends(rate_limit),
    api_key: bool = Depends(verify_api_key)
):
    """Generate one primary and two alternative routes away from the alert area"""
    try:
        route_service: RouteService = request.app.state.route_service
        routes = await route_service.generate_routes(
            req.alert_id, req.start_location, req.start_lat, req.start_lng
        )
        if routes is None:
            raise HTTPException(status_code=404, detail="Alert not found")
        return routes
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Route generation failed", alert_id=req.alert_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate routes")
