"""API dependencies."""

from narration_service.domain.narration import NarrationEngine
from narration_service.services import POICatalog, narration_engine, poi_catalog


def get_engine() -> NarrationEngine:
    return narration_engine


def get_catalog() -> POICatalog:
    return poi_catalog
