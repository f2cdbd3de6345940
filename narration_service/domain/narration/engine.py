from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Protocol, Sequence
from uuid import UUID

from prometheus_client import Counter

from narration_common import bind_visitor_id, reset_visitor_id

from .exceptions import PoiNotFound
from .geometry import GeoLocation
from .models import (
    POI,
    ContentType,
    Language,
    NarrationResult,
    NarrationTrigger,
    POIType,
    Visitor,
    VisitLog,
    find_nearest_poi,
    utcnow,
)
from .trigger_policy import EdgeTriggerPolicy, TriggerDecision
from .visitor_store import VisitorStore

logger = logging.getLogger(__name__)

NARRATION_DECISIONS = Counter(
    "narration_decisions_total",
    "Narration decisions by outcome",
    ["outcome"],
)
LOCATION_UPDATES = Counter(
    "visitor_location_updates_total",
    "Location updates received from visitor devices",
)

NO_POI_MESSAGE = "No point of interest nearby"
_REQUEST_REASONS = (NarrationTrigger.MANUAL_REQUEST, NarrationTrigger.SCHEDULED_EVENT)


class CatalogSource(Protocol):
    def snapshot(self) -> Sequence[POI]:
        ...

    def get(self, code: str) -> Optional[POI]:
        ...


class NarrationEngine:
    def __init__(
        self,
        catalog: CatalogSource,
        store: Optional[VisitorStore] = None,
        *,
        max_distance_m: float = 10.0,
        retrigger_cooldown_s: float = 300.0,
        default_content_type: ContentType = ContentType.AUDIO,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.catalog = catalog
        self.store = store or VisitorStore()
        self.max_distance_m = max_distance_m
        self.default_content_type = ContentType(default_content_type)
        self.policy = EdgeTriggerPolicy(retrigger_cooldown_s)
        self._clock = clock

    def register_visitor(
        self,
        device_id: str,
        preferred_language: Optional[Language] = None,
        location: Optional[GeoLocation] = None,
    ) -> Visitor:
        """Create the visitor for ``device_id`` or return the existing one."""

        now = self._clock()
        candidate = Visitor(
            device_id=device_id,
            preferred_language=Language(preferred_language or Language.VIETNAMESE),
            current_location=location,
            last_activity=now,
        )
        stored = self.store.add(candidate)
        if stored is not candidate:
            with self.store.session(stored.id) as visitor:
                if preferred_language is not None:
                    visitor.preferred_language = Language(preferred_language)
                if location is not None:
                    visitor.move_to(location, now)
                else:
                    visitor.last_activity = now
        return self.store.snapshot(stored.id)

    def get_visitor(self, visitor_id: UUID) -> Visitor:
        return self.store.snapshot(visitor_id)

    def update_visitor_location(self, visitor_id: UUID, location: GeoLocation) -> None:
        with self.store.session(visitor_id) as visitor:
            visitor.move_to(location, self._clock())
        LOCATION_UPDATES.inc()

    def set_preferred_language(self, visitor_id: UUID, language: Language) -> None:
        with self.store.session(visitor_id) as visitor:
            visitor.preferred_language = Language(language)
            visitor.last_activity = self._clock()
        logger.info("Visitor %s switched language to %s", visitor_id, language)

    def trigger_narration(self, visitor_id: UUID, location: GeoLocation) -> NarrationResult:
        token = bind_visitor_id(visitor_id)
        try:
            with self.store.session(visitor_id) as visitor:
                LOCATION_UPDATES.inc()
                now = self._clock()
                visitor.move_to(location, now)
                return self._evaluate_proximity(visitor, now)
        finally:
            reset_visitor_id(token)

    def request_narration(
        self,
        visitor_id: UUID,
        poi_code: str,
        *,
        reason: NarrationTrigger = NarrationTrigger.MANUAL_REQUEST,
        content_type: Optional[ContentType] = None,
    ) -> NarrationResult:
        """Narrate a named POI regardless of where the visitor stands."""

        reason = NarrationTrigger(reason)
        if reason not in _REQUEST_REASONS:
            raise ValueError(f"{reason.value} cannot be requested explicitly")

        token = bind_visitor_id(visitor_id)
        try:
            with self.store.session(visitor_id) as visitor:
                poi = self._find_by_code(poi_code)
                now = self._clock()
                visitor.last_activity = now
                distance = poi.distance_to(visitor.current_location) if visitor.current_location else None
                return self._narrate(visitor, poi, reason, now, distance=distance, content_type=content_type)
        finally:
            reset_visitor_id(token)

    def trigger_first_visit(self, visitor_id: UUID) -> NarrationResult:
        """Welcome a visitor with no history at the closest entrance."""

        token = bind_visitor_id(visitor_id)
        try:
            with self.store.session(visitor_id) as visitor:
                if visitor.visit_history:
                    return NarrationResult(should_play=False, message="Visitor has already started the tour")
                if visitor.current_location is None:
                    return NarrationResult(should_play=False, message="Visitor location is unknown")

                pois = self.catalog.snapshot()
                entrances = [poi for poi in pois if poi.type == POIType.ENTRANCE]
                match = find_nearest_poi(visitor.current_location, entrances, None) or find_nearest_poi(
                    visitor.current_location, pois, None
                )
                if match is None:
                    return NarrationResult(should_play=False, message=NO_POI_MESSAGE)

                poi, distance = match
                now = self._clock()
                visitor.last_activity = now
                return self._narrate(visitor, poi, NarrationTrigger.FIRST_VISIT, now, distance=distance)
        finally:
            reset_visitor_id(token)

    def _evaluate_proximity(self, visitor: Visitor, now: datetime) -> NarrationResult:
        match = find_nearest_poi(visitor.current_location, self.catalog.snapshot(), self.max_distance_m)
        if match is None:
            self.policy.leave(visitor.trigger_state)
            NARRATION_DECISIONS.labels(outcome="no_poi").inc()
            logger.debug("No POI within %.1fm of %s", self.max_distance_m, visitor.current_location)
            return NarrationResult(should_play=False, message=NO_POI_MESSAGE)

        poi, distance = match
        decision = self.policy.evaluate(visitor.trigger_state, poi.code, now)
        if decision is not TriggerDecision.FIRE:
            NARRATION_DECISIONS.labels(outcome="suppressed").inc()
            logger.debug("Suppressed narration for %s (%s)", poi.code, decision.value)
            if decision is TriggerDecision.COOLING_DOWN:
                message = f"Narration for {poi.name} played recently"
            elif _last_visit_played(visitor, poi.code):
                message = f"Narration for {poi.name} already played"
            else:
                message = f"No narration available for {poi.name}"
            return NarrationResult(
                should_play=False,
                message=message,
                target_poi=poi,
                trigger_reason=NarrationTrigger.PROXIMITY_DETECTED,
                distance_m=distance,
            )

        return self._narrate(visitor, poi, NarrationTrigger.PROXIMITY_DETECTED, now, distance=distance)

    def _narrate(
        self,
        visitor: Visitor,
        poi: POI,
        reason: NarrationTrigger,
        now: datetime,
        *,
        distance: Optional[float] = None,
        content_type: Optional[ContentType] = None,
    ) -> NarrationResult:
        content = poi.resolve_content(visitor.preferred_language, content_type or self.default_content_type)
        visitor.visit_history.append(
            VisitLog(
                poi_id=poi.id,
                poi_code=poi.code,
                visited_at=now,
                content_played=content is not None,
                trigger=reason,
            )
        )

        if content is None:
            NARRATION_DECISIONS.labels(outcome="no_content").inc()
            logger.warning(
                "No %s content for %s in %s or fallback language",
                (content_type or self.default_content_type).value,
                poi.code,
                visitor.preferred_language.value,
            )
            return NarrationResult(
                should_play=False,
                message=f"No narration available for {poi.name}",
                target_poi=poi,
                trigger_reason=reason,
                distance_m=distance,
            )

        self.policy.mark_narrated(visitor.trigger_state, poi.code, now)
        NARRATION_DECISIONS.labels(outcome="played").inc()
        logger.info("Narrating %s (%s) via %s", poi.code, content.language.value, reason.value)
        return NarrationResult(
            should_play=True,
            message=f"Now playing: {content.title}",
            target_poi=poi,
            content=content,
            trigger_reason=reason,
            distance_m=distance,
        )

    def _find_by_code(self, poi_code: str) -> POI:
        poi = self.catalog.get(poi_code)
        if poi is None or not poi.is_active:
            raise PoiNotFound(poi_code)
        return poi


def _last_visit_played(visitor: Visitor, poi_code: str) -> bool:
    for entry in reversed(visitor.visit_history):
        if entry.poi_code == poi_code:
            return entry.content_played
    return False
