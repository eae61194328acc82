# main.py - Disaster Alert API
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from contextlib import asynccontextmanager
import logging
import time
import structlog
from datetime import datetime, timezone

from config import settings
from middleware import setup_logging_middleware
from services.storage import MemStorage
from services.analytics_service import AnalyticsService
from services.gemini_service import GeminiService
from services.prediction_service import PredictionService
from services.route_service import RouteService
from services.seed_service import SeedService
from utils.dependencies import close_redis

# Import Routers
from routers import alerts, locations, predictions, routes, analytics, system

# --- Structured Logging Setup ---
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

# --- Lifespan Event Handler ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager"""
    logger.info("Starting Disaster Alert API", version=settings.api_version)
    app.state.start_time = time.time()

    # One store per application lifetime, shared by all services
    storage = MemStorage()
    app.state.storage = storage

    try:
        generator = GeminiService(app=app)
        app.state.gemini_service = generator
        app.state.analytics_service = AnalyticsService(storage)
        app.state.prediction_service = PredictionService(storage, generator, app=app)
        app.state.route_service = RouteService(storage, generator, app=app)
        app.state.seed_service = SeedService(storage, generator, app=app)
        logger.info("Services initialized successfully")
    except Exception as e:
        logger.error("Service initialization failed", error=str(e))
        raise RuntimeError("Service initialization failed") from e

    if settings.seed_sample_data:
        try:
            result = await app.state.seed_service.initialize_sample_data()
            logger.info("Sample data initialization", result=result)
        except Exception as e:
            logger.warning("Sample data initialization failed", error=str(e))

    logger.info("Application startup completed")

    yield

    # Shutdown
    logger.info("Shutting down Disaster Alert API")

    try:
        await close_redis()
    except Exception as e:
        logger.error("Error closing Redis", error=str(e))

    logger.info("Application shutdown completed")

# --- App Setup ---
app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Setup logging middleware
app = setup_logging_middleware(app)

# --- Security & Middleware Setup ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# Add trusted host middleware for production
if not settings.debug:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.trusted_hosts
    )

# --- Include Routers ---
app.include_router(alerts.router)
app.include_router(locations.router)
app.include_router(predictions.router)
app.include_router(routes.router)
app.include_router(analytics.router)
app.include_router(system.router)

# --- Exception Handlers ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Invalid request data", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request data",
            "detail": jsonable_encoder(exc.errors())
        }
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception", error=str(exc), path=request.url.path, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred" if not settings.debug else str(exc),
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    )

@app.get("/", summary="API Information", tags=["General"])
async def root():
    """Get basic API information"""
    return {
        "message": "Disaster Alert - AI-Powered Disaster Prediction & Evacuation",
        "version": settings.api_version,
        "docs": "/docs",
        "health": "/health",
        "api": {
            "alerts": "/api/alerts",
            "locations": "/api/locations",
            "predictions": "/api/predictions",
            "routes": "/api/routes",
            "analytics": "/api/analytics",
            "stats": "/api/stats",
            "init_data": "/api/init-data"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
