from fastapi import APIRouter, Depends, HTTPException, Request
from typing import List
import structlog

from middleware import LoggingRoute
from models.model import UserLocation, UserLocationCreate
from utils.dependencies import get_storage, verify_api_key, rate_limit

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/locations",
    tags=["Location Management"],
    route_class=LoggingRoute
)

@router.get("", summary="List monitored locations", response_model=List[UserLocation])
async def get_locations(request: Request):
    try:
        return get_storage(request.app).get_all_locations()
    except Exception as e:
        logger.error("Failed to fetch locations", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch locations")

@router.get("/{location_id}", summary="Get location by ID", response_model=UserLocation)
async def get_location(request: Request, location_id: str):
    try:
        location = get_storage(request.app).get_location(location_id)
        if not location:
            raise HTTPException(status_code=404, detail="Location not found")
        return location
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Get location failed", location_id=location_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch location")

@router.post("", summary="Register location", response_model=UserLocation)
async def create_location(
    request: Request,
    location_data: UserLocationCreate,
    _: bool = Depends(rate_limit),
    api_key: bool = Depends(verify_api_key)
):
    """Register a location to receive alerts for the selected disaster types"""
    try:
        location = get_storage(request.app).create_location(location_data)
        logger.info("Location created", location_id=location.id, name=location.name)
        return location
    except Exception as e:
        logger.error("Location creation failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create location")

@router.delete("/{location_id}", summary="Delete location")
async def delete_location(
    request: Request,
    location_id: str,
    _: bool = Depends(rate_limit),
    api_key: bool = Depends(verify_api_key)
):
    try:
        if not get_storage(request.app).delete_location(location_id):
            raise HTTPException(status_code=404, detail="Location not found")
        logger.info("Location deleted", location_id=location_id)
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Location deletion failed", location_id=location_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to delete location")
