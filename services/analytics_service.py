"""
Analytics aggregation over the in-memory entity store
"""
import random
from datetime import timedelta
from typing import Dict, List, Optional

import structlog

from models.base import DisasterType, HIGH_RISK_SEVERITIES, enum_value
from models.model import AccuracyPoint, AnalyticsData, DashboardStats, Prediction
from services.storage import MemStorage

logger = structlog.get_logger(__name__)

# Placeholder until response times are actually measured
AVG_RESPONSE_TIME_MINUTES = 3.2

ACCURACY_TREND_DAYS = 7
ACCURACY_TREND_BAND = (82.0, 92.0)
RECENT_WINDOW = timedelta(hours=24)


def _average_confidence(predictions: List[Prediction]) -> float:
    if not predictions:
        return 0.0
    return sum(p.confidence for p in predictions) / len(predictions) * 100


class AnalyticsService:
    """Derives dashboard statistics from a fresh scan of the store on every call"""

    def __init__(self, storage: MemStorage, rng: Optional[random.Random] = None):
        self.storage = storage
        self.rng = rng or random.Random()

    def _count_active_alerts(self) -> int:
        return sum(1 for alert in self.storage.alerts.values() if alert.is_active)

    def _predictions_by_type(self, predictions: List[Prediction]) -> Dict[str, int]:
        counts = {disaster_type.value: 0 for disaster_type in DisasterType}
        for prediction in predictions:
            key = enum_value(prediction.disaster_type)
            if key in counts:
                counts[key] += 1
        return counts

    def _accuracy_trend(self) -> List[AccuracyPoint]:
        # Synthetic series; there is no ground-truth outcome tracking yet
        today = self.storage.clock()
        low, high = ACCURACY_TREND_BAND
        points = []
        for days_ago in range(ACCURACY_TREND_DAYS - 1, -1, -1):
            day = today - timedelta(days=days_ago)
            points.append(AccuracyPoint(
                date=f"{day:%b} {day.day}",
                accuracy=low + self.rng.random() * (high - low),
            ))
        return points

    def get_analytics(self) -> AnalyticsData:
        predictions = self.storage.predictions.values()
        analytics = AnalyticsData(
            total_predictions=len(predictions),
            # Confidence stands in for accuracy until outcomes are recorded
            accuracy_rate=_average_confidence(predictions),
            active_alerts=self._count_active_alerts(),
            avg_response_time=AVG_RESPONSE_TIME_MINUTES,
            predictions_by_type=self._predictions_by_type(predictions),
            accuracy_trend=self._accuracy_trend(),
        )
        logger.debug("Analytics computed", total_predictions=analytics.total_predictions)
        return analytics

    def get_stats(self) -> DashboardStats:
        predictions = self.storage.predictions.values()
        cutoff = self.storage.clock() - RECENT_WINDOW
        high_risk_areas = sum(
            1 for alert in self.storage.alerts.values()
            if alert.is_active and enum_value(alert.severity) in HIGH_RISK_SEVERITIES
        )
        return DashboardStats(
            active_alerts=self._count_active_alerts(),
            total_predictions=sum(1 for p in predictions if p.created_at > cutoff),
            high_risk_areas=high_risk_areas,
            avg_confidence=_average_confidence(predictions),
        )
