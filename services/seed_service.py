"""
Sample data initialisation for demos and fresh dashboards
"""
import random
from datetime import timedelta
from typing import Any, Dict, Optional

from config import settings
from models.base import SeverityLevel, enum_value
from models.model import AlertCreate, PredictionCreate
from services.base_service import BaseService
from services.gemini_service import GeminiService
from services.storage import MemStorage

SAMPLE_LOCATIONS = [
    {"name": "Mumbai", "lat": 19.0760, "lng": 72.8777},
    {"name": "Chennai", "lat": 13.0827, "lng": 80.2707},
    {"name": "Kolkata", "lat": 22.5726, "lng": 88.3639},
    {"name": "Coastal Odisha", "lat": 20.2961, "lng": 85.8245},
]

SAMPLE_DATA_SOURCES = ["Weather API", "Satellite Data", "Historical Records", "Climate Models"]

ALERT_CHANCE = 0.6
ACTIVE_CHANCE = 0.7
PREDICTION_WINDOW_HOURS = 72


def sample_severity(probability: float) -> SeverityLevel:
    if probability > 0.8:
        return SeverityLevel.CRITICAL
    if probability > 0.6:
        return SeverityLevel.HIGH
    if probability > 0.4:
        return SeverityLevel.MODERATE
    return SeverityLevel.LOW


def title_case(disaster_type: str) -> str:
    return " ".join(word.capitalize() for word in disaster_type.split("_"))


class SeedService(BaseService):
    """Populates the store with predictions (and some alerts) for sample cities"""

    def __init__(
        self,
        storage: MemStorage,
        generator: GeminiService,
        rng: Optional[random.Random] = None,
        **kwargs
    ):
        self.generator = generator
        self.rng = rng or random.Random()
        super().__init__(storage=storage, **kwargs)

    async def initialize_sample_data(self) -> Dict[str, Any]:
        alerts_created = 0
        predictions_created = 0

        for loc in SAMPLE_LOCATIONS:
            result = await self.generator.predict_disaster(loc["name"], loc["lat"], loc["lng"])
            disaster_type = enum_value(result.disaster_type)
            now = self.storage.clock()

            if self.rng.random() < ALERT_CHANCE:
                severity = sample_severity(result.probability).value
                self.storage.create_alert(AlertCreate(
                    disaster_type=disaster_type,
                    severity=severity,
                    title=f"{title_case(disaster_type)} Warning - {loc['name']}",
                    description=result.reasoning or (
                        f"AI detected potential {disaster_type} risk in {loc['name']} region "
                        f"based on current weather patterns and historical data."
                    ),
                    affected_regions=[loc["name"]],
                    latitude=loc["lat"],
                    longitude=loc["lng"],
                    predicted_impact=f"{severity.capitalize()} impact expected",
                    confidence=result.confidence,
                    is_active=self.rng.random() < ACTIVE_CHANCE,
                    expires_at=now + timedelta(hours=settings.alert_ttl_hours),
                ))
                alerts_created += 1

            self.storage.create_prediction(PredictionCreate(
                disaster_type=disaster_type,
                location=loc["name"],
                latitude=loc["lat"],
                longitude=loc["lng"],
                probability=result.probability,
                confidence=result.confidence,
                contributing_factors=result.contributing_factors,
                data_sources=list(SAMPLE_DATA_SOURCES),
                predicted_time=now + timedelta(hours=self.rng.random() * PREDICTION_WINDOW_HOURS),
            ))
            predictions_created += 1

        self._log_operation("initialize_sample_data", {
            "alerts_created": alerts_created,
            "predictions_created": predictions_created,
        })
        return {
            "success": True,
            "message": "Sample data initialized",
            "alerts_created": alerts_created,
            "predictions_created": predictions_created,
        }
