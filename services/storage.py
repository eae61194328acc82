"""
In-memory entity store for alerts, user locations, predictions and evacuation routes
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

import structlog
from pydantic import BaseModel

from models.model import (
    Alert,
    AlertCreate,
    AlertUpdate,
    EvacuationRoute,
    EvacuationRouteCreate,
    Prediction,
    PredictionCreate,
    UserLocation,
    UserLocationCreate,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)
Clock = Callable[[], datetime]

# Fields assigned by the store and never taken from callers
_SYSTEM_FIELDS = ("id", "created_at")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _fields_of(data: Union[BaseModel, Mapping[str, Any]]) -> Dict[str, Any]:
    """Shallow field mapping of a model or plain mapping, without system fields"""
    fields = dict(data)
    for name in _SYSTEM_FIELDS:
        fields.pop(name, None)
    return fields


class EntityCollection(Generic[T]):
    """Keyed collection of one entity kind, read back newest first"""

    def __init__(self, model_cls: Type[T], clock: Clock):
        self.model_cls = model_cls
        self._clock = clock
        self._records: Dict[str, T] = {}
        self._last_created_at: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self._records)

    def _next_created_at(self) -> datetime:
        now = self._clock()
        if self._last_created_at is not None and now < self._last_created_at:
            now = self._last_created_at
        self._last_created_at = now
        return now

    def all(self) -> List[T]:
        # sorted() is stable with reverse=True, so equal timestamps keep insertion order
        return sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)

    def values(self) -> List[T]:
        return list(self._records.values())

    def get(self, record_id: str) -> Optional[T]:
        return self._records.get(record_id)

    def create(self, data: Union[BaseModel, Mapping[str, Any]]) -> T:
        record = self.model_cls.model_construct(
            **_fields_of(data),
            id=str(uuid.uuid4()),
            created_at=self._next_created_at(),
        )
        self._records[record.id] = record
        logger.debug("Record created", kind=self.model_cls.__name__, record_id=record.id)
        return record

    def _field_changes(self, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """Updates keyed by field name; camelCase aliases are mapped, unknown keys dropped"""
        fields = self.model_cls.model_fields
        aliases = {
            field.validation_alias: name
            for name, field in fields.items()
            if isinstance(field.validation_alias, str)
        }
        changes = {}
        for key, value in updates.items():
            name = aliases.get(key, key)
            if name in fields and name not in _SYSTEM_FIELDS:
                changes[name] = value
        return changes

    def replace(self, record_id: str, updates: Mapping[str, Any]) -> Optional[T]:
        existing = self._records.get(record_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=self._field_changes(updates))
        self._records[record_id] = updated
        return updated

    def delete(self, record_id: str) -> bool:
        removed = self._records.pop(record_id, None) is not None
        if removed:
            logger.debug("Record deleted", kind=self.model_cls.__name__, record_id=record_id)
        return removed


class MemStorage:
    """
    Process-lifetime storage for the four entity kinds.

    No validation is performed here; callers pass already-validated models
    (or raw mappings, which are stored as-is). Missing ids are reported with
    None / False, never with exceptions.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock: Clock = clock or utc_now
        self.alerts: EntityCollection[Alert] = EntityCollection(Alert, self._now)
        self.locations: EntityCollection[UserLocation] = EntityCollection(UserLocation, self._now)
        self.predictions: EntityCollection[Prediction] = EntityCollection(Prediction, self._now)
        self.routes: EntityCollection[EvacuationRoute] = EntityCollection(EvacuationRoute, self._now)

    def _now(self) -> datetime:
        # self.clock may be reassigned after construction
        return self.clock()

    # Alerts
    def get_all_alerts(self) -> List[Alert]:
        return self.alerts.all()

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        return self.alerts.get(alert_id)

    def create_alert(self, alert: Union[AlertCreate, Mapping[str, Any]]) -> Alert:
        return self.alerts.create(alert)

    def update_alert(self, alert_id: str, updates: Union[AlertUpdate, Mapping[str, Any]]) -> Optional[Alert]:
        if isinstance(updates, AlertUpdate):
            updates = updates.changes()
        return self.alerts.replace(alert_id, updates)

    def delete_alert(self, alert_id: str) -> bool:
        return self.alerts.delete(alert_id)

    # User Locations
    def get_all_locations(self) -> List[UserLocation]:
        return self.locations.all()

    def get_location(self, location_id: str) -> Optional[UserLocation]:
        return self.locations.get(location_id)

    def create_location(self, location: Union[UserLocationCreate, Mapping[str, Any]]) -> UserLocation:
        return self.locations.create(location)

    def delete_location(self, location_id: str) -> bool:
        return self.locations.delete(location_id)

    # Predictions
    def get_all_predictions(self) -> List[Prediction]:
        return self.predictions.all()

    def get_prediction(self, prediction_id: str) -> Optional[Prediction]:
        return self.predictions.get(prediction_id)

    def create_prediction(self, prediction: Union[PredictionCreate, Mapping[str, Any]]) -> Prediction:
        return self.predictions.create(prediction)

    # Evacuation Routes
    def get_all_routes(self) -> List[EvacuationRoute]:
        return self.routes.all()

    def get_route(self, route_id: str) -> Optional[EvacuationRoute]:
        return self.routes.get(route_id)

    def get_routes_by_alert(self, alert_id: str) -> List[EvacuationRoute]:
        return [route for route in self.routes.all() if route.alert_id == alert_id]

    def create_route(self, route: Union[EvacuationRouteCreate, Mapping[str, Any]]) -> EvacuationRoute:
        return self.routes.create(route)

    def counts(self) -> Dict[str, int]:
        return {
            "alerts": len(self.alerts),
            "locations": len(self.locations),
            "predictions": len(self.predictions),
            "routes": len(self.routes),
        }
