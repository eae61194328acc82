"""
Disaster Alert Data Models
Centralized export of all Pydantic models
"""

# Base models and enums
from .base import (
    ApiModel,
    DisasterType,
    SeverityLevel,
    HIGH_RISK_SEVERITIES,
    enum_value
)

# Entity and aggregate models
from .model import (
    AlertCreate,
    Alert,
    AlertUpdate,
    UserLocationCreate,
    UserLocation,
    PredictionCreate,
    Prediction,
    PredictionRequest,
    Waypoint,
    EvacuationRouteCreate,
    EvacuationRoute,
    RouteRequest,
    AccuracyPoint,
    AnalyticsData,
    DashboardStats,
    DisasterPredictionResult,
    GeneratedRoute
)

__all__ = [
    # Base
    "ApiModel",
    "DisasterType",
    "SeverityLevel",
    "HIGH_RISK_SEVERITIES",
    "enum_value",

    # Entities
    "AlertCreate",
    "Alert",
    "AlertUpdate",
    "UserLocationCreate",
    "UserLocation",
    "PredictionCreate",
    "Prediction",
    "PredictionRequest",
    "Waypoint",
    "EvacuationRouteCreate",
    "EvacuationRoute",
    "RouteRequest",

    # Aggregates
    "AccuracyPoint",
    "AnalyticsData",
    "DashboardStats",

    # AI generator output
    "DisasterPredictionResult",
    "GeneratedRoute",
]
