import random
import pytest
from datetime import timedelta

from services.analytics_service import AnalyticsService, AVG_RESPONSE_TIME_MINUTES


@pytest.fixture
def analytics(storage):
    return AnalyticsService(storage, rng=random.Random(7))


class TestAnalytics:
    def test_empty_store(self, analytics):
        result = analytics.get_analytics()

        assert result.total_predictions == 0
        assert result.accuracy_rate == 0
        assert result.active_alerts == 0
        assert result.predictions_by_type == {
            "flood": 0, "cyclone": 0, "heavy_rainfall": 0, "earthquake": 0, "wildfire": 0
        }

    def test_accuracy_rate_is_mean_confidence(self, storage, analytics, prediction_data):
        for confidence in (0.5, 0.7, 0.9):
            storage.create_prediction(prediction_data(confidence=confidence))

        assert analytics.get_analytics().accuracy_rate == pytest.approx(70.0)
        assert analytics.get_stats().avg_confidence == pytest.approx(70.0)

    def test_predictions_by_type(self, storage, analytics, prediction_data):
        storage.create_prediction(prediction_data(disaster_type="flood"))
        storage.create_prediction(prediction_data(disaster_type="flood"))
        storage.create_prediction(prediction_data(disaster_type="wildfire"))
        storage.create_prediction(prediction_data(disaster_type="tsunami"))

        result = analytics.get_analytics()

        assert result.predictions_by_type["flood"] == 2
        assert result.predictions_by_type["wildfire"] == 1
        assert "tsunami" not in result.predictions_by_type
        assert result.total_predictions == 4

    def test_response_time_is_constant(self, analytics):
        assert analytics.get_analytics().avg_response_time == AVG_RESPONSE_TIME_MINUTES == 3.2

    def test_accuracy_trend_shape(self, analytics, clock):
        trend = analytics.get_analytics().accuracy_trend

        assert len(trend) == 7
        assert all(82 <= point.accuracy < 92 for point in trend)
        assert trend[-1].date == f"{clock.now:%b} {clock.now.day}"
        oldest = clock.now - timedelta(days=6)
        assert trend[0].date == f"{oldest:%b} {oldest.day}"

    def test_accuracy_trend_is_not_cached(self, analytics):
        first = [p.accuracy for p in analytics.get_analytics().accuracy_trend]
        second = [p.accuracy for p in analytics.get_analytics().accuracy_trend]
        assert first != second

    def test_reflects_store_changes(self, storage, analytics, alert_data):
        alert = storage.create_alert(alert_data)
        assert analytics.get_analytics().active_alerts == 1

        storage.update_alert(alert.id, {"is_active": False})
        assert analytics.get_analytics().active_alerts == 0


class TestStats:
    def test_empty_store(self, analytics):
        stats = analytics.get_stats()

        assert stats.active_alerts == 0
        assert stats.total_predictions == 0
        assert stats.high_risk_areas == 0
        assert stats.avg_confidence == 0

    def test_active_and_high_risk_counts(self, storage, analytics, alert_data):
        storage.create_alert(dict(alert_data, severity="critical", is_active=True))
        storage.create_alert(dict(alert_data, severity="low", is_active=False))

        stats = analytics.get_stats()

        assert stats.active_alerts == 1
        assert stats.high_risk_areas == 1

    def test_inactive_high_severity_not_high_risk(self, storage, analytics, alert_data):
        storage.create_alert(dict(alert_data, severity="high", is_active=False))
        storage.create_alert(dict(alert_data, severity="moderate", is_active=True))

        stats = analytics.get_stats()

        assert stats.active_alerts == 1
        assert stats.high_risk_areas == 0

    def test_recent_window_differs_from_all_time(self, storage, analytics, clock, prediction_data):
        """Stats count the last 24h only, analytics count everything"""
        storage.create_prediction(prediction_data())
        storage.create_prediction(prediction_data())
        clock.advance(hours=25)
        storage.create_prediction(prediction_data())

        assert analytics.get_stats().total_predictions == 1
        assert analytics.get_analytics().total_predictions == 3

    def test_prediction_exactly_24h_old_excluded(self, storage, analytics, clock, prediction_data):
        storage.create_prediction(prediction_data())
        clock.advance(hours=24)

        assert analytics.get_stats().total_predictions == 0
