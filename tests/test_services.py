import asyncio
import math
import random
import pytest
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from google.genai import errors as genai_errors
from tenacity import wait_none

from models.base import DisasterType
from services.gemini_service import GeminiService, CONTRIBUTING_FACTORS, FALLBACK_REASONING
from services.prediction_service import PredictionService, PREDICTION_DATA_SOURCES, severity_for_probability
from services.route_service import RouteService
from services.seed_service import SeedService, SAMPLE_LOCATIONS, sample_severity, title_case


@pytest.fixture
def offline_generator():
    """Generator without API key - always falls back"""
    return GeminiService(api_key="", rng=random.Random(42))


class TestGeminiFallback:
    def test_no_client_without_api_key(self, offline_generator):
        assert offline_generator.client is None

    def test_fallback_prediction_ranges(self, offline_generator):
        for _ in range(20):
            result = asyncio.run(offline_generator.predict_disaster("Mumbai", 19.076, 72.8777))

            assert result.disaster_type in ("flood", "cyclone", "heavy_rainfall")
            assert 0.3 <= result.probability < 0.8
            assert 0.7 <= result.confidence < 0.9
            assert set(result.contributing_factors) == set(CONTRIBUTING_FACTORS)
            assert all(0 <= w < 1 for w in result.contributing_factors.values())
            assert result.reasoning == FALLBACK_REASONING

    def test_fallback_route_geometry(self, offline_generator):
        start_lat, start_lng = 13.0827, 80.2707
        route = asyncio.run(offline_generator.generate_evacuation_route(start_lat, start_lng, "cyclone", "high"))

        assert route.end_location == "Safe Zone"
        assert 10 <= route.distance < 30
        assert route.estimated_time == pytest.approx(route.distance * 3.5)
        assert 0.7 <= route.safety_rating < 0.95
        assert [w.name for w in route.waypoints] == ["Highway Junction", "Regional Route"]

        # End point lies `distance` km away on a flat-earth approximation
        dlat_km = (route.end_lat - start_lat) * 111
        dlng_km = (route.end_lng - start_lng) * 111 * math.cos(math.radians(start_lat))
        assert math.hypot(dlat_km, dlng_km) == pytest.approx(route.distance)

        junction = route.waypoints[0]
        assert junction.lat == pytest.approx(start_lat + (route.end_lat - start_lat) * 0.3)
        assert junction.lng == pytest.approx(start_lng + (route.end_lng - start_lng) * 0.3)

    def test_model_response_is_used(self):
        generator = GeminiService(api_key="", rng=random.Random(1))
        generator.client = MagicMock()
        response = MagicMock()
        response.text = (
            '{"disaster_type": "earthquake", "probability": 0.65, "confidence": 0.9,'
            ' "contributing_factors": {"geographical_risk": 0.95}, "reasoning": "Active fault line"}'
        )
        generator.client.aio.models.generate_content = AsyncMock(return_value=response)

        result = asyncio.run(generator.predict_disaster("Kathmandu", 27.7, 85.3))

        assert result.disaster_type == "earthquake"
        assert result.probability == 0.65
        assert result.reasoning == "Active fault line"

    def test_camel_case_model_response_accepted(self):
        generator = GeminiService(api_key="", rng=random.Random(1))
        generator.client = MagicMock()
        response = MagicMock()
        response.text = (
            '{"endLocation": "Hill Shelter", "endLat": 19.3, "endLng": 73.0,'
            ' "waypoints": [], "distance": 25, "estimatedTime": 60, "safetyRating": 0.88}'
        )
        generator.client.aio.models.generate_content = AsyncMock(return_value=response)

        route = asyncio.run(generator.generate_evacuation_route(19.07, 72.87, "flood", "high"))

        assert route.end_location == "Hill Shelter"
        assert route.safety_rating == 0.88

    def test_invalid_model_json_falls_back(self):
        generator = GeminiService(api_key="", rng=random.Random(1))
        generator.client = MagicMock()
        response = MagicMock()
        response.text = '{"disaster_type": "meteor", "probability": 3}'
        generator.client.aio.models.generate_content = AsyncMock(return_value=response)

        result = asyncio.run(generator.predict_disaster("Mumbai", 19.076, 72.8777))

        assert result.reasoning == FALLBACK_REASONING

    def test_client_error_falls_back_without_retry(self):
        generator = GeminiService(api_key="", rng=random.Random(1))
        generator.client = MagicMock()
        generator.client.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("quota"))

        result = asyncio.run(generator.predict_disaster("Mumbai", 19.076, 72.8777))

        assert result.reasoning == FALLBACK_REASONING
        assert generator.client.aio.models.generate_content.await_count == 1

    def test_server_errors_are_retried(self):
        generator = GeminiService(api_key="", rng=random.Random(1))
        generator.retry_wait = wait_none()
        generator.client = MagicMock()
        server_error = genai_errors.ServerError(503, {"error": {"message": "overloaded"}})
        generator.client.aio.models.generate_content = AsyncMock(side_effect=server_error)

        route = asyncio.run(generator.generate_evacuation_route(19.07, 72.87, "flood", "high"))

        assert route.end_location == "Safe Zone"
        assert generator.client.aio.models.generate_content.await_count == 3


class TestPredictionService:
    @pytest.mark.parametrize("probability,expected", [
        (0.61, "moderate"),
        (0.7, "moderate"),
        (0.71, "high"),
        (0.8, "high"),
        (0.81, "critical"),
    ])
    def test_severity_for_probability(self, probability, expected):
        assert severity_for_probability(probability).value == expected

    def test_high_probability_creates_alert(self, storage, clock, stub_generator):
        stub_generator.probability = 0.85
        service = PredictionService(storage, stub_generator)

        prediction = asyncio.run(service.create_prediction("Mumbai", 19.076, 72.8777))

        assert storage.get_prediction(prediction.id) is prediction
        assert prediction.data_sources == PREDICTION_DATA_SOURCES
        assert prediction.predicted_time == clock.now + timedelta(hours=24)

        alerts = storage.get_all_alerts()
        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.severity == "critical"
        assert alert.title == "FLOOD Warning - Mumbai"
        assert alert.description == "Monsoon build-up near Mumbai"
        assert alert.affected_regions == ["Mumbai"]
        assert alert.predicted_impact == "critical impact expected in the region"
        assert alert.is_active is True
        assert alert.expires_at == clock.now + timedelta(hours=48)
        assert alert.confidence == stub_generator.confidence

    def test_threshold_probability_creates_no_alert(self, storage, stub_generator):
        stub_generator.probability = 0.6
        service = PredictionService(storage, stub_generator)

        asyncio.run(service.create_prediction("Pune", 18.52, 73.85))

        assert storage.get_all_alerts() == []
        assert len(storage.get_all_predictions()) == 1


class TestRouteService:
    def test_primary_and_two_alternatives(self, storage, alert_data, stub_generator):
        alert = storage.create_alert(alert_data)
        service = RouteService(storage, stub_generator)

        routes = asyncio.run(service.generate_routes(alert.id, "Marina Beach", 13.05, 80.28))

        assert len(routes) == 3
        assert [r.is_primary for r in routes] == [True, False, False]
        assert all(r.alert_id == alert.id for r in routes)
        assert all(r.start_location == "Marina Beach" for r in routes)
        assert stub_generator.route_calls == [(13.05, 80.28, "cyclone", "high")] * 3
        assert {r.id for r in storage.get_routes_by_alert(alert.id)} == {r.id for r in routes}

    def test_missing_alert(self, storage, stub_generator):
        service = RouteService(storage, stub_generator)

        assert asyncio.run(service.generate_routes("missing", "Somewhere", 1.0, 2.0)) is None
        assert stub_generator.route_calls == []
        assert storage.get_all_routes() == []


class TestSeedService:
    def test_sample_severity(self):
        assert sample_severity(0.9) == "critical"
        assert sample_severity(0.65) == "high"
        assert sample_severity(0.5) == "moderate"
        assert sample_severity(0.2) == "low"

    def test_title_case(self):
        assert title_case("heavy_rainfall") == "Heavy Rainfall"

    def test_creates_prediction_per_location(self, storage, clock, stub_generator):
        service = SeedService(storage, stub_generator, rng=random.Random(3))

        result = asyncio.run(service.initialize_sample_data())

        predictions = storage.get_all_predictions()
        assert result["success"] is True
        assert result["predictions_created"] == len(SAMPLE_LOCATIONS) == len(predictions)
        assert result["alerts_created"] == len(storage.get_all_alerts())
        assert {p.location for p in predictions} == {loc["name"] for loc in SAMPLE_LOCATIONS}
        for prediction in predictions:
            assert clock.now <= prediction.predicted_time <= clock.now + timedelta(hours=72)
        for alert in storage.get_all_alerts():
            assert alert.title.startswith("Flood Warning - ")
            assert alert.severity == "high"

    def test_alert_types_are_known(self, storage, offline_generator):
        service = SeedService(storage, offline_generator, rng=random.Random(11))

        asyncio.run(service.initialize_sample_data())

        known = {t.value for t in DisasterType}
        assert all(p.disaster_type in known for p in storage.get_all_predictions())
