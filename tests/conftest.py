import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from main import app
from models.model import DisasterPredictionResult, GeneratedRoute, Waypoint
from services.storage import MemStorage


class FakeClock:
    """Manually advanced clock for deterministic timestamps"""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


class StubGenerator:
    """Stands in for GeminiService with fixed outputs"""

    def __init__(self, probability=0.75, confidence=0.8, disaster_type="flood"):
        self.probability = probability
        self.confidence = confidence
        self.disaster_type = disaster_type
        self.route_calls = []

    async def predict_disaster(self, location, latitude, longitude, historical_data=None):
        return DisasterPredictionResult(
            disaster_type=self.disaster_type,
            probability=self.probability,
            confidence=self.confidence,
            contributing_factors={"weather_patterns": 0.9, "geographical_risk": 0.4},
            reasoning=f"Monsoon build-up near {location}",
        )

    async def generate_evacuation_route(self, start_lat, start_lng, disaster_type, severity):
        self.route_calls.append((start_lat, start_lng, disaster_type, severity))
        index = len(self.route_calls)
        return GeneratedRoute(
            end_location=f"Relief Camp {index}",
            end_lat=start_lat + 0.1 * index,
            end_lng=start_lng + 0.1 * index,
            waypoints=[Waypoint(name="Ring Road", instruction="Continue north")],
            distance=12.0 * index,
            estimated_time=42.0 * index,
            safety_rating=0.9,
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(clock):
    """Fresh store per test"""
    return MemStorage(clock=clock)


@pytest.fixture
def stub_generator():
    return StubGenerator()


@pytest.fixture
def alert_data():
    """Valid alert payload (snake_case)"""
    return {
        "disaster_type": "cyclone",
        "severity": "high",
        "title": "CYCLONE Warning - Chennai",
        "description": "Deep depression intensifying over the Bay of Bengal",
        "affected_regions": ["Chennai", "Kanchipuram"],
        "latitude": 13.0827,
        "longitude": 80.2707,
        "predicted_impact": "high impact expected in the region",
        "confidence": 0.85,
        "is_active": True,
        "expires_at": None,
    }


@pytest.fixture
def prediction_data():
    def _make(confidence=0.8, disaster_type="flood", probability=0.5):
        return {
            "disaster_type": disaster_type,
            "location": "Mumbai",
            "latitude": 19.076,
            "longitude": 72.8777,
            "probability": probability,
            "confidence": confidence,
            "contributing_factors": {"weather_patterns": 0.7},
            "data_sources": ["Weather API"],
            "predicted_time": datetime(2025, 7, 2, 12, 0, tzinfo=timezone.utc),
        }
    return _make


@pytest.fixture
def route_data():
    def _make(alert_id, is_primary=True):
        return {
            "alert_id": alert_id,
            "start_location": "Dadar",
            "start_lat": 19.018,
            "start_lng": 72.843,
            "end_location": "Safe Zone",
            "end_lat": 19.2,
            "end_lng": 72.9,
            "waypoints": [{"name": "Highway Junction", "instruction": "Take the main highway northbound"}],
            "distance": 21.5,
            "estimated_time": 75.25,
            "safety_rating": 0.82,
            "is_primary": is_primary,
        }
    return _make


@pytest.fixture
def client():
    """TestClient with a fresh store (lifespan runs per test)"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def stubbed_client(client, stub_generator):
    """TestClient whose services use the stub generator"""
    state = client.app.state
    state.prediction_service.generator = stub_generator
    state.route_service.generator = stub_generator
    state.seed_service.generator = stub_generator
    return client
