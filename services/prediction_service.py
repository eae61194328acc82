"""
Prediction service: AI prediction, storage and threshold-based alert creation
"""
from datetime import timedelta
from typing import Optional, Tuple

from config import settings
from models.base import SeverityLevel, enum_value
from models.model import AlertCreate, DisasterPredictionResult, Prediction, PredictionCreate
from services.base_service import BaseService
from services.gemini_service import GeminiService
from services.storage import MemStorage

PREDICTION_DATA_SOURCES = ["Weather API", "Satellite Imagery", "Historical Data", "Climate Models"]


def severity_for_probability(probability: float) -> SeverityLevel:
    """Severity of an auto-generated alert; only called above the alert threshold"""
    if probability > settings.critical_severity_threshold:
        return SeverityLevel.CRITICAL
    if probability > settings.high_severity_threshold:
        return SeverityLevel.HIGH
    return SeverityLevel.MODERATE


class PredictionService(BaseService):
    """Creates predictions and raises alerts for high-probability ones"""

    def __init__(self, storage: MemStorage, generator: GeminiService, **kwargs):
        self.generator = generator
        super().__init__(storage=storage, **kwargs)

    async def create_prediction(self, location: str, latitude: float, longitude: float) -> Prediction:
        """
        Predict, store the prediction, and raise an alert when probability is high

        Returns:
            The stored prediction
        """
        result = await self.generator.predict_disaster(location, latitude, longitude)
        now = self.storage.clock()

        prediction = self.storage.create_prediction(PredictionCreate(
            disaster_type=result.disaster_type,
            location=location,
            latitude=latitude,
            longitude=longitude,
            probability=result.probability,
            confidence=result.confidence,
            contributing_factors=result.contributing_factors,
            data_sources=list(PREDICTION_DATA_SOURCES),
            predicted_time=now + timedelta(hours=settings.prediction_horizon_hours),
        ))

        alert_id, severity = self._maybe_create_alert(result, location, latitude, longitude)
        self._log_operation("create_prediction", {
            "prediction_id": prediction.id,
            "location": location,
            "disaster_type": prediction.disaster_type,
            "probability": round(result.probability, 3),
            "alert_id": alert_id,
            "severity": severity,
        })
        return prediction

    def _maybe_create_alert(
        self,
        result: DisasterPredictionResult,
        location: str,
        latitude: float,
        longitude: float
    ) -> Tuple[Optional[str], Optional[str]]:
        if result.probability <= settings.alert_probability_threshold:
            return None, None

        severity = severity_for_probability(result.probability).value
        disaster_type = enum_value(result.disaster_type)
        alert = self.storage.create_alert(AlertCreate(
            disaster_type=disaster_type,
            severity=severity,
            title=f"{disaster_type.upper()} Warning - {location}",
            description=result.reasoning or f"Elevated {disaster_type} risk detected for {location}",
            affected_regions=[location],
            latitude=latitude,
            longitude=longitude,
            predicted_impact=f"{severity} impact expected in the region",
            confidence=result.confidence,
            is_active=True,
            expires_at=self.storage.clock() + timedelta(hours=settings.alert_ttl_hours),
        ))
        return alert.id, severity
