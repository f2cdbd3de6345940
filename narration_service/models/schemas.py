from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from narration_service.domain.narration import (
    POI,
    Content,
    ContentType,
    GeoLocation,
    Language,
    NarrationResult,
    NarrationTrigger,
    POIType,
    Visitor,
    VisitLog,
)


class LocationPayload(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)
    altitude: float = Field(0.0, allow_inf_nan=False)

    def to_domain(self) -> GeoLocation:
        return GeoLocation(self.latitude, self.longitude, self.altitude)

    @classmethod
    def from_domain(cls, location: GeoLocation) -> "LocationPayload":
        return cls(latitude=location.latitude, longitude=location.longitude, altitude=location.altitude)


class VisitorCreateRequest(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=128)
    preferred_language: Optional[Language] = None
    location: Optional[LocationPayload] = None


class LanguageUpdateRequest(BaseModel):
    language: Language


class NarrationRequest(BaseModel):
    poi_code: str = Field(..., min_length=1)
    reason: Literal["manual_request", "scheduled_event"] = "manual_request"
    content_type: Optional[ContentType] = None


class VisitLogResponse(BaseModel):
    poi_id: UUID
    poi_code: str
    visited_at: datetime
    duration_seconds: int
    content_played: bool
    trigger: NarrationTrigger

    @classmethod
    def from_domain(cls, entry: VisitLog) -> "VisitLogResponse":
        return cls(
            poi_id=entry.poi_id,
            poi_code=entry.poi_code,
            visited_at=entry.visited_at,
            duration_seconds=entry.duration_seconds,
            content_played=entry.content_played,
            trigger=entry.trigger,
        )


class VisitorResponse(BaseModel):
    id: UUID
    device_id: str
    preferred_language: Language
    current_location: Optional[LocationPayload] = None
    last_activity: datetime
    visit_history: List[VisitLogResponse] = []

    @classmethod
    def from_domain(cls, visitor: Visitor) -> "VisitorResponse":
        location = visitor.current_location
        return cls(
            id=visitor.id,
            device_id=visitor.device_id,
            preferred_language=visitor.preferred_language,
            current_location=LocationPayload.from_domain(location) if location else None,
            last_activity=visitor.last_activity,
            visit_history=[VisitLogResponse.from_domain(entry) for entry in visitor.visit_history],
        )


class ContentResponse(BaseModel):
    id: UUID
    language: Language
    type: ContentType
    title: str
    description: str
    media_url: Optional[str] = None
    duration_seconds: int
    metadata: Dict[str, str] = {}

    @classmethod
    def from_domain(cls, content: Content) -> "ContentResponse":
        return cls(
            id=content.id,
            language=content.language,
            type=content.type,
            title=content.title,
            description=content.description,
            media_url=content.media_url,
            duration_seconds=content.duration_seconds,
            metadata=dict(content.metadata),
        )


class POISummary(BaseModel):
    id: UUID
    code: str
    name: str
    type: POIType
    location: LocationPayload
    tags: List[str] = []
    is_active: bool
    languages: List[Language] = []

    @classmethod
    def from_domain(cls, poi: POI) -> "POISummary":
        return cls(
            id=poi.id,
            code=poi.code,
            name=poi.name,
            type=poi.type,
            location=LocationPayload.from_domain(poi.location),
            tags=list(poi.tags),
            is_active=poi.is_active,
            languages=poi.available_languages(),
        )


class NarrationResponse(BaseModel):
    should_play: bool
    message: str
    trigger_reason: Optional[NarrationTrigger] = None
    distance_m: Optional[float] = None
    poi: Optional[POISummary] = None
    content: Optional[ContentResponse] = None

    @classmethod
    def from_domain(cls, result: NarrationResult) -> "NarrationResponse":
        return cls(
            should_play=result.should_play,
            message=result.message,
            trigger_reason=result.trigger_reason,
            distance_m=round(result.distance_m, 2) if result.distance_m is not None else None,
            poi=POISummary.from_domain(result.target_poi) if result.target_poi else None,
            content=ContentResponse.from_domain(result.content) if result.content else None,
        )
