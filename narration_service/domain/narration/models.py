from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from .geometry import GeoLocation
from .trigger_policy import TriggerState


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Language(str, Enum):
    VIETNAMESE = "vi"
    ENGLISH = "en"
    CHINESE = "zh"
    KOREAN = "ko"
    JAPANESE = "ja"
    FRENCH = "fr"
    THAI = "th"


DEFAULT_LANGUAGE = Language.VIETNAMESE


class ContentType(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"
    TEXT = "text"
    INTERACTIVE = "interactive"


class POIType(str, Enum):
    RESTAURANT = "restaurant"
    FOOD_STALL = "food_stall"
    LANDMARK = "landmark"
    ENTRANCE = "entrance"
    REST_AREA = "rest_area"
    CULTURAL = "cultural"
    HISTORICAL = "historical"


class NarrationTrigger(str, Enum):
    PROXIMITY_DETECTED = "proximity_detected"
    MANUAL_REQUEST = "manual_request"
    SCHEDULED_EVENT = "scheduled_event"
    FIRST_VISIT = "first_visit"


@dataclass
class Content:
    """Narration asset in one language and media type, owned by a POI."""

    language: Language
    type: ContentType
    title: str
    description: str = ""
    audio_url: Optional[str] = None
    video_url: Optional[str] = None
    duration_seconds: int = 0
    is_active: bool = True
    metadata: Dict[str, str] = field(default_factory=dict)
    id: UUID = field(default_factory=uuid4)

    @property
    def media_url(self) -> Optional[str]:
        if self.type == ContentType.AUDIO:
            return self.audio_url
        if self.type == ContentType.VIDEO:
            return self.video_url
        return self.audio_url or self.video_url

    def matches(self, language: Language, content_type: ContentType) -> bool:
        return self.is_active and self.language == language and self.type == content_type


@dataclass
class POI:
    code: str
    type: POIType
    name: str
    location: GeoLocation
    contents: List[Content] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def distance_to(self, location: GeoLocation) -> float:
        return self.location.distance_to(location)

    def resolve_content(
        self,
        language: Language,
        content_type: ContentType = ContentType.AUDIO,
    ) -> Optional[Content]:
        """Pick the narration for ``language``, falling back to Vietnamese.

        Both the exact match and the fallback only consider active entries.
        """

        for candidate in (language, DEFAULT_LANGUAGE):
            for content in self.contents:
                if content.matches(candidate, content_type):
                    return content
        return None

    def available_languages(self, content_type: ContentType = ContentType.AUDIO) -> List[Language]:
        seen: List[Language] = []
        for content in self.contents:
            if content.is_active and content.type == content_type and content.language not in seen:
                seen.append(content.language)
        return seen


def find_nearest_poi(
    location: Optional[GeoLocation],
    pois: Iterable[POI],
    max_distance: Optional[float] = 10.0,
) -> Optional[Tuple[POI, float]]:
    """Return the closest active POI within ``max_distance`` meters.

    ``max_distance=None`` lifts the radius. Ties keep the POI seen first.
    """

    if location is None:
        return None

    nearest: Optional[POI] = None
    min_distance = float("inf")
    for poi in pois:
        if not poi.is_active:
            continue
        distance = location.distance_to(poi.location)
        if max_distance is not None and distance > max_distance:
            continue
        if distance < min_distance:
            min_distance = distance
            nearest = poi

    if nearest is None:
        return None
    return nearest, min_distance


@dataclass(frozen=True)
class VisitLog:
    poi_id: UUID
    poi_code: str
    visited_at: datetime
    content_played: bool
    trigger: NarrationTrigger
    duration_seconds: int = 0


@dataclass
class Visitor:
    device_id: str
    preferred_language: Language = DEFAULT_LANGUAGE
    current_location: Optional[GeoLocation] = None
    visit_history: List[VisitLog] = field(default_factory=list)
    last_activity: datetime = field(default_factory=utcnow)
    id: UUID = field(default_factory=uuid4)
    trigger_state: TriggerState = field(default_factory=TriggerState, repr=False)

    def find_nearest_poi(self, all_pois: Sequence[POI], max_distance: float = 10.0) -> Optional[POI]:
        match = find_nearest_poi(self.current_location, all_pois, max_distance)
        return match[0] if match else None

    def move_to(self, location: GeoLocation, at: datetime) -> None:
        self.current_location = location
        self.last_activity = at


@dataclass(frozen=True)
class NarrationResult:
    should_play: bool
    message: str
    target_poi: Optional[POI] = None
    content: Optional[Content] = None
    trigger_reason: Optional[NarrationTrigger] = None
    distance_m: Optional[float] = None
