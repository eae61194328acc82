"""
Evacuation route service: one primary route plus alternatives per request
"""
from typing import List, Optional

from models.base import enum_value
from models.model import EvacuationRoute, EvacuationRouteCreate, GeneratedRoute
from services.base_service import BaseService
from services.gemini_service import GeminiService
from services.storage import MemStorage

ALTERNATIVE_ROUTE_COUNT = 2


class RouteService(BaseService):
    """Generates and stores evacuation routes for an alert"""

    def __init__(self, storage: MemStorage, generator: GeminiService, **kwargs):
        self.generator = generator
        super().__init__(storage=storage, **kwargs)

    async def generate_routes(
        self,
        alert_id: str,
        start_location: str,
        start_lat: float,
        start_lng: float
    ) -> Optional[List[EvacuationRoute]]:
        """
        Generate the primary route followed by the alternatives

        Returns:
            [primary, *alternatives], or None when the alert does not exist
        """
        alert = self.storage.get_alert(alert_id)
        if alert is None:
            return None

        disaster_type = enum_value(alert.disaster_type)
        severity = enum_value(alert.severity)

        routes = []
        for index in range(1 + ALTERNATIVE_ROUTE_COUNT):
            generated = await self.generator.generate_evacuation_route(
                start_lat, start_lng, disaster_type, severity
            )
            routes.append(self._store_route(
                alert_id, start_location, start_lat, start_lng, generated, is_primary=index == 0
            ))

        self._log_operation("generate_routes", {
            "alert_id": alert_id,
            "route_ids": [route.id for route in routes],
        })
        return routes

    def _store_route(
        self,
        alert_id: str,
        start_location: str,
        start_lat: float,
        start_lng: float,
        generated: GeneratedRoute,
        is_primary: bool
    ) -> EvacuationRoute:
        return self.storage.create_route(EvacuationRouteCreate(
            alert_id=alert_id,
            start_location=start_location,
            start_lat=start_lat,
            start_lng=start_lng,
            end_location=generated.end_location,
            end_lat=generated.end_lat,
            end_lng=generated.end_lng,
            waypoints=generated.waypoints,
            distance=generated.distance,
            estimated_time=generated.estimated_time,
            safety_rating=generated.safety_rating,
            is_primary=is_primary,
        ))
