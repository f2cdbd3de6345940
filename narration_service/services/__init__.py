"""Process-wide catalog and narration engine instances."""

from __future__ import annotations

from narration_service.core.config import settings
from narration_service.domain.narration import NarrationEngine, VisitorStore

from .catalog import POICatalog, load_catalog_file, parse_catalog

__all__ = ["POICatalog", "load_catalog_file", "parse_catalog", "poi_catalog", "narration_engine"]

poi_catalog = POICatalog()

narration_engine = NarrationEngine(
    poi_catalog,
    VisitorStore(),
    max_distance_m=settings.PROXIMITY_RADIUS_M,
    retrigger_cooldown_s=settings.RETRIGGER_COOLDOWN_SECONDS,
    default_content_type=settings.DEFAULT_CONTENT_TYPE,
)
