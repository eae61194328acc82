from fastapi import APIRouter, Depends, HTTPException, Request
import structlog
from datetime import datetime, timezone
import time

from config import settings
from middleware import LoggingRoute
from services.seed_service import SeedService
from utils.dependencies import get_storage, get_redis, verify_api_key, rate_limit

logger = structlog.get_logger(__name__)

router = APIRouter(
    tags=["System & Monitoring"],
    route_class=LoggingRoute
)

@router.get("/health", summary="Service health check", tags=["Monitoring"])
async def health_check(request: Request):
    """Liveness check with store counts and generator mode"""
    storage = get_storage(request.app)
    gemini_service = request.app.state.gemini_service
    redis_conn = await get_redis()
    start_time = getattr(request.app.state, "start_time", None)

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.api_version,
        "services": {
            "storage": {"status": "healthy", "records": storage.counts()},
            "gemini": {"status": "enabled" if gemini_service.client else "fallback"},
            "redis": {"status": "enabled" if redis_conn else "disabled"},
        },
        "uptime_seconds": round(time.time() - start_time, 2) if start_time else 0
    }

@router.post("/api/init-data", summary="Initialize sample data", tags=["Testing"])
async def init_data(
    request: Request,
    _: bool = Depends(rate_limit),
    api_key: bool = Depends(verify_api_key)
):
    """Populate the store with sample predictions and alerts for demo cities"""
    try:
        seed_service: SeedService = request.app.state.seed_service
        return await seed_service.initialize_sample_data()
    except Exception as e:
        logger.error("Sample data initialization failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to initialize data")
