"""
Gemini-backed disaster prediction and evacuation route generation.

Every public call returns usable data: when no API key is configured, the
request fails, or the model's JSON does not validate, pseudo-random fallback
values are returned instead.
"""
import json
import math
import random
from typing import Any, Dict, Optional

from google import genai
from google.genai import types

from config import settings
from models.model import DisasterPredictionResult, GeneratedRoute, Waypoint
from services.base_service import BaseService

PREDICTION_SYSTEM_PROMPT = """You are an expert disaster prediction AI system.
Analyze the given location and environmental data to predict potential disasters.
Consider factors like geography, climate patterns, historical incidents, and current conditions.

Respond with JSON in this exact format:
{
  "disaster_type": "flood" | "cyclone" | "heavy_rainfall" | "earthquake" | "wildfire",
  "probability": number between 0 and 1,
  "confidence": number between 0 and 1,
  "contributing_factors": {
    "weather_patterns": number between 0 and 1,
    "geographical_risk": number between 0 and 1,
    "historical_frequency": number between 0 and 1,
    "seasonal_trends": number between 0 and 1,
    "climate_indicators": number between 0 and 1
  },
  "reasoning": "brief explanation of the prediction"
}"""

ROUTE_SYSTEM_PROMPT = """You are an evacuation route planning AI.
Generate a safe evacuation route away from the disaster zone.
Consider the disaster type, severity, and optimal safe locations.

Respond with JSON in this format:
{
  "end_location": "Safe zone name",
  "end_lat": number,
  "end_lng": number,
  "waypoints": [
    {"name": "waypoint name", "instruction": "turn left/right/continue", "lat": number, "lng": number}
  ],
  "distance": number in km,
  "estimated_time": number in minutes,
  "safety_rating": number between 0 and 1
}"""

CONTRIBUTING_FACTORS = (
    "weather_patterns",
    "geographical_risk",
    "historical_frequency",
    "seasonal_trends",
    "climate_indicators",
)
FALLBACK_DISASTER_TYPES = ("flood", "cyclone", "heavy_rainfall")
FALLBACK_REASONING = "Based on geographical and climate analysis"

KM_PER_DEGREE = 111.0
MINUTES_PER_KM = 3.5


class GeminiService(BaseService):
    """Prediction / route generator with random fallback"""

    def __init__(self, api_key: Optional[str] = None, rng: Optional[random.Random] = None, **kwargs):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.rng = rng or random.Random()
        super().__init__(**kwargs)

    def _setup(self):
        self.client = genai.Client(api_key=self.api_key) if self.api_key else None
        if self.client is None:
            self.logger.warning("GEMINI_API_KEY not configured, using fallback generator")

    async def _generate_json(self, model: str, system_prompt: str, prompt: str) -> str:
        response = await self._api_call_with_retry(
            self.client.aio.models.generate_content,
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                response_mime_type="application/json",
            ),
            max_attempts=settings.gemini_max_attempts,
        )
        raw_json = response.text
        if not raw_json:
            raise ValueError("Empty response from model")
        return raw_json

    async def predict_disaster(
        self,
        location: str,
        latitude: float,
        longitude: float,
        historical_data: Optional[Dict[str, Any]] = None
    ) -> DisasterPredictionResult:
        """
        Predict the most likely disaster for a location

        Args:
            location: Location name
            latitude: Latitude of the location
            longitude: Longitude of the location
            historical_data: Optional extra context passed to the model

        Returns:
            Validated prediction, or fallback values when the model is unavailable
        """
        if self.client is None:
            return self.fallback_prediction()

        prompt = (
            f"Analyze disaster risk for:\n"
            f"Location: {location}\n"
            f"Coordinates: {latitude}, {longitude}\n"
        )
        if historical_data:
            prompt += f"Historical data: {json.dumps(historical_data, default=str)}\n"
        prompt += "\nProvide a comprehensive disaster risk assessment."

        try:
            raw_json = await self._generate_json(
                settings.gemini_prediction_model, PREDICTION_SYSTEM_PROMPT, prompt
            )
            result = DisasterPredictionResult.model_validate_json(raw_json)
            self._log_operation("predict_disaster", {"location": location, "disaster_type": result.disaster_type})
            return result
        except Exception as e:
            self._handle_error(e, {"operation": "predict_disaster", "location": location})
        return self.fallback_prediction()

    async def generate_evacuation_route(
        self,
        start_lat: float,
        start_lng: float,
        disaster_type: str,
        severity: str
    ) -> GeneratedRoute:
        """
        Generate an evacuation route leading away from a disaster zone

        Returns:
            Validated route, or a synthetic route when the model is unavailable
        """
        if self.client is None:
            return self.fallback_route(start_lat, start_lng)

        prompt = (
            f"Generate an evacuation route from coordinates {start_lat}, {start_lng}.\n"
            f"Disaster type: {disaster_type}\n"
            f"Severity: {severity}\n\n"
            f"The route should move away from the danger zone to a safe location."
        )

        try:
            raw_json = await self._generate_json(settings.gemini_route_model, ROUTE_SYSTEM_PROMPT, prompt)
            return GeneratedRoute.model_validate_json(raw_json)
        except Exception as e:
            self._handle_error(e, {"operation": "generate_evacuation_route", "disaster_type": disaster_type})
        return self.fallback_route(start_lat, start_lng)

    def fallback_prediction(self) -> DisasterPredictionResult:
        return DisasterPredictionResult(
            disaster_type=self.rng.choice(FALLBACK_DISASTER_TYPES),
            probability=0.3 + self.rng.random() * 0.5,
            confidence=0.7 + self.rng.random() * 0.2,
            contributing_factors={name: self.rng.random() for name in CONTRIBUTING_FACTORS},
            reasoning=FALLBACK_REASONING,
        )

    def fallback_route(self, start_lat: float, start_lng: float) -> GeneratedRoute:
        angle = self.rng.random() * 2 * math.pi
        distance = 10 + self.rng.random() * 20
        end_lat = start_lat + (distance / KM_PER_DEGREE) * math.cos(angle)
        end_lng = start_lng + (distance / (KM_PER_DEGREE * math.cos(math.radians(start_lat)))) * math.sin(angle)

        def point_at(fraction: float):
            return (
                start_lat + (end_lat - start_lat) * fraction,
                start_lng + (end_lng - start_lng) * fraction,
            )

        junction_lat, junction_lng = point_at(0.3)
        regional_lat, regional_lng = point_at(0.7)

        return GeneratedRoute(
            end_location="Safe Zone",
            end_lat=end_lat,
            end_lng=end_lng,
            waypoints=[
                Waypoint(
                    name="Highway Junction",
                    instruction="Take the main highway northbound",
                    lat=junction_lat,
                    lng=junction_lng,
                ),
                Waypoint(
                    name="Regional Route",
                    instruction="Continue on regional road",
                    lat=regional_lat,
                    lng=regional_lng,
                ),
            ],
            distance=distance,
            estimated_time=distance * MINUTES_PER_KM,
            safety_rating=0.7 + self.rng.random() * 0.25,
        )
