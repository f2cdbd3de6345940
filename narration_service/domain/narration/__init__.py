from .engine import NarrationEngine
from .exceptions import CatalogError, InvalidCoordinate, NarrationError, PoiNotFound, VisitorNotFound
from .geometry import EARTH_RADIUS_M, GeoLocation, haversine_m
from .models import (
    DEFAULT_LANGUAGE,
    POI,
    Content,
    ContentType,
    Language,
    NarrationResult,
    NarrationTrigger,
    POIType,
    Visitor,
    VisitLog,
    find_nearest_poi,
)
from .trigger_policy import EdgeTriggerPolicy, TriggerDecision, TriggerState
from .visitor_store import VisitorStore

__all__ = [
    "CatalogError",
    "Content",
    "ContentType",
    "DEFAULT_LANGUAGE",
    "EARTH_RADIUS_M",
    "EdgeTriggerPolicy",
    "GeoLocation",
    "InvalidCoordinate",
    "Language",
    "NarrationEngine",
    "NarrationError",
    "NarrationResult",
    "NarrationTrigger",
    "POI",
    "POIType",
    "PoiNotFound",
    "TriggerDecision",
    "TriggerState",
    "VisitLog",
    "Visitor",
    "VisitorNotFound",
    "VisitorStore",
    "find_nearest_poi",
    "haversine_m",
]
