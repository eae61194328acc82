from pydantic import ConfigDict, Field, field_validator
from typing import Any, List, Optional, Dict
from datetime import datetime

# Import shared base models
from .base import ApiModel, DisasterType, SeverityLevel


def check_factor_weights(factors: Dict[str, float]) -> Dict[str, float]:
    for name, weight in factors.items():
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"Contributing factor '{name}' must be between 0 and 1")
    return factors


# --- Alerts ---

class AlertCreate(ApiModel):
    disaster_type: DisasterType = Field(..., description="Type of disaster")
    severity: SeverityLevel = Field(..., description="Severity level")
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    affected_regions: List[str] = Field(default_factory=list, description="Names of affected regions")
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    predicted_impact: str = Field(..., description="Expected impact summary")
    confidence: float = Field(..., ge=0.0, le=1.0)
    is_active: bool = True
    expires_at: Optional[datetime] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "disaster_type": "flood",
                "severity": "high",
                "title": "FLOOD Warning - Mumbai",
                "description": "Heavy monsoon rainfall expected over the next 24 hours.",
                "affected_regions": ["Mumbai"],
                "latitude": 19.076,
                "longitude": 72.8777,
                "predicted_impact": "high impact expected in the region",
                "confidence": 0.82,
                "is_active": True,
                "expires_at": "2025-07-02T10:30:00"
            }
        }
    )


class Alert(AlertCreate):
    id: str
    created_at: datetime


class AlertUpdate(ApiModel):
    """Partial alert update - only supplied fields are merged"""
    disaster_type: Optional[DisasterType] = None
    severity: Optional[SeverityLevel] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    affected_regions: Optional[List[str]] = None
    latitude: Optional[float] = Field(None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(None, ge=-180.0, le=180.0)
    predicted_impact: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None

    def changes(self) -> Dict[str, Any]:
        """Explicitly supplied fields; null only clears the nullable expires_at"""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name == "expires_at"
        }


# --- User Locations ---

class UserLocationCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    radius: float = Field(10, ge=1, le=100, description="Alert radius in km")
    notification_preferences: List[DisasterType] = Field(
        ..., min_length=1, description="Disaster types to monitor"
    )


class UserLocation(UserLocationCreate):
    id: str
    created_at: datetime


# --- Predictions ---

class PredictionCreate(ApiModel):
    disaster_type: DisasterType
    location: str = Field(..., min_length=1, max_length=100)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    probability: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    contributing_factors: Dict[str, float] = Field(default_factory=dict)
    data_sources: List[str] = Field(default_factory=list)
    predicted_time: datetime

    @field_validator('contributing_factors')
    @classmethod
    def validate_factor_weights(cls, v):
        return check_factor_weights(v)


class Prediction(PredictionCreate):
    id: str
    created_at: datetime


class PredictionRequest(ApiModel):
    """Request body for AI prediction of a location"""
    location: str = Field(..., min_length=1, max_length=100)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


# --- Evacuation Routes ---

class Waypoint(ApiModel):
    name: str
    instruction: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None


class EvacuationRouteCreate(ApiModel):
    alert_id: str
    start_location: str
    start_lat: float = Field(..., ge=-90.0, le=90.0)
    start_lng: float = Field(..., ge=-180.0, le=180.0)
    end_location: str
    end_lat: float
    end_lng: float
    waypoints: List[Waypoint] = Field(default_factory=list)
    distance: float = Field(..., ge=0.0, description="Distance in km")
    estimated_time: float = Field(..., ge=0.0, description="Estimated time in minutes")
    safety_rating: float = Field(..., ge=0.0, le=1.0)
    is_primary: bool = True


class EvacuationRoute(EvacuationRouteCreate):
    id: str
    created_at: datetime


class RouteRequest(ApiModel):
    """Request body for generating evacuation routes for an alert"""
    alert_id: str = Field(..., min_length=1)
    start_location: str = Field(..., min_length=1, max_length=200)
    start_lat: float = Field(..., ge=-90.0, le=90.0)
    start_lng: float = Field(..., ge=-180.0, le=180.0)


# --- Analytics ---

class AccuracyPoint(ApiModel):
    date: str
    accuracy: float


class AnalyticsData(ApiModel):
    total_predictions: int
    accuracy_rate: float
    active_alerts: int
    avg_response_time: float
    predictions_by_type: Dict[str, int]
    accuracy_trend: List[AccuracyPoint]


class DashboardStats(ApiModel):
    active_alerts: int
    total_predictions: int
    high_risk_areas: int
    avg_confidence: float


# --- AI generator output ---

class DisasterPredictionResult(ApiModel):
    disaster_type: DisasterType
    probability: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    contributing_factors: Dict[str, float] = Field(default_factory=dict)
    reasoning: str = ""

    @field_validator('contributing_factors')
    @classmethod
    def validate_factor_weights(cls, v):
        return check_factor_weights(v)


class GeneratedRoute(ApiModel):
    end_location: str
    end_lat: float
    end_lng: float
    waypoints: List[Waypoint] = Field(default_factory=list)
    distance: float = Field(..., ge=0.0)
    estimated_time: float = Field(..., ge=0.0)
    safety_rating: float = Field(..., ge=0.0, le=1.0)
