"""
Disaster Alert Services
Centralized export of all service classes
"""

from .storage import MemStorage, EntityCollection
from .base_service import BaseService
from .analytics_service import AnalyticsService
from .gemini_service import GeminiService
from .prediction_service import PredictionService, severity_for_probability
from .route_service import RouteService
from .seed_service import SeedService

__all__ = [
    # Store
    "MemStorage",
    "EntityCollection",

    # Base classes
    "BaseService",

    # Services
    "AnalyticsService",
    "GeminiService",
    "PredictionService",
    "RouteService",
    "SeedService",
    "severity_for_probability",
]
