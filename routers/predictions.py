from fastapi import APIRouter, Depends, HTTPException, Request
from typing import List
import structlog

from middleware import LoggingRoute
from models.model import Prediction, PredictionRequest
from services.prediction_service import PredictionService
from utils.dependencies import get_storage, verify_api_key, rate_limit

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/predictions",
    tags=["Predictions"],
    route_class=LoggingRoute
)

@router.get("", summary="List predictions", response_model=List[Prediction])
async def get_predictions(request: Request):
    try:
        return get_storage(request.app).get_all_predictions()
    except Exception as e:
        logger.error("Failed to fetch predictions", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch predictions")

@router.get("/{prediction_id}", summary="Get prediction by ID", response_model=Prediction)
async def get_prediction(request: Request, prediction_id: str):
    try:
        prediction = get_storage(request.app).get_prediction(prediction_id)
        if not prediction:
            raise HTTPException(status_code=404, detail="Prediction not found")
        return prediction
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to fetch prediction", prediction_id=prediction_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch prediction")

@router.post("", summary="Generate AI prediction for a location", response_model=Prediction)
async def create_prediction(
    request: Request,
    req: PredictionRequest,
    _: bool = Depends(rate_limit),
    api_key: bool = Depends(verify_api_key)
):
    """
    Run the AI risk assessment for a location and store the result.
    High-probability predictions also raise an alert.
    """
    try:
        prediction_service: PredictionService = request.app.state.prediction_service
        return await prediction_service.create_prediction(req.location, req.latitude, req.longitude)
    except Exception as e:
        logger.error("Prediction generation failed", location=req.location, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate prediction")
