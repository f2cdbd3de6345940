from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, ValidationError

from narration_service.domain.narration import (
    POI,
    CatalogError,
    Content,
    ContentType,
    GeoLocation,
    Language,
    POIType,
)
from narration_service.domain.narration.models import utcnow

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[1] / "data" / "pois.json"


class ContentRecord(BaseModel):
    id: Optional[UUID] = None
    language: Language
    type: ContentType = ContentType.AUDIO
    title: str
    description: str = ""
    audio_url: Optional[str] = None
    video_url: Optional[str] = None
    duration_seconds: int = Field(default=0, ge=0)
    is_active: bool = True
    metadata: Dict[str, str] = Field(default_factory=dict)

    def to_domain(self) -> Content:
        return Content(
            id=self.id or uuid4(),
            language=self.language,
            type=self.type,
            title=self.title,
            description=self.description,
            audio_url=self.audio_url,
            video_url=self.video_url,
            duration_seconds=self.duration_seconds,
            is_active=self.is_active,
            metadata=dict(self.metadata),
        )


class POIRecord(BaseModel):
    id: Optional[UUID] = None
    code: str = Field(min_length=1)
    type: POIType
    name: str
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    altitude: float = 0.0
    tags: List[str] = Field(default_factory=list)
    is_active: bool = True
    contents: List[ContentRecord] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_domain(self) -> POI:
        created = self.created_at or utcnow()
        return POI(
            id=self.id or uuid4(),
            code=self.code,
            type=self.type,
            name=self.name,
            location=GeoLocation(self.lat, self.lon, self.altitude),
            contents=[content.to_domain() for content in self.contents],
            tags=list(self.tags),
            is_active=self.is_active,
            created_at=created,
            updated_at=self.updated_at or created,
        )


def parse_catalog(data: object, *, source: object = None) -> List[POI]:
    """Convert decoded catalog JSON into POIs.

    Accepts a bare list of POI objects or a mapping with a ``pois`` list.
    Duplicate codes are rejected because manual requests address POIs by code.
    """

    if isinstance(data, dict):
        data = data.get("pois")
    if not isinstance(data, list):
        raise CatalogError(
            f"Expected catalog to be a list of POIs, got {type(data).__name__}",
            path=source,
        )

    pois: List[POI] = []
    seen_codes: set[str] = set()
    for index, raw in enumerate(data):
        try:
            record = POIRecord.model_validate(raw)
        except ValidationError as exc:
            raise CatalogError(f"Invalid POI at index {index}: {exc}", path=source) from exc
        if record.code in seen_codes:
            raise CatalogError(f"Duplicate POI code {record.code!r}", path=source)
        seen_codes.add(record.code)
        pois.append(record.to_domain())
    return pois


def load_catalog_file(path: os.PathLike[str] | str | None = None) -> List[POI]:
    """Load POIs from a JSON file, defaulting to the packaged sample catalog."""

    resolved_path = Path(path).expanduser() if path else DEFAULT_CATALOG_PATH

    if not resolved_path.is_file():
        raise CatalogError(f"Catalog file does not exist: {resolved_path}", path=resolved_path)

    if resolved_path.stat().st_size == 0:
        raise CatalogError(f"Catalog file is empty: {resolved_path}", path=resolved_path)

    try:
        with resolved_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Invalid JSON in {resolved_path}: {exc}", path=resolved_path) from exc

    return parse_catalog(data, source=resolved_path)


class POICatalog:
    """Read-mostly POI snapshot shared by every narration request.

    Readers get an immutable tuple; :meth:`replace` swaps in a new one, so an
    evaluation in flight keeps the snapshot it started with.
    """

    def __init__(self, pois: Iterable[POI] = ()) -> None:
        self._pois: Tuple[POI, ...] = tuple(pois)
        self._write_lock = threading.Lock()
        self.loaded_at: Optional[datetime] = utcnow() if self._pois else None

    def __len__(self) -> int:
        return len(self._pois)

    @property
    def is_loaded(self) -> bool:
        return self.loaded_at is not None

    def snapshot(self) -> Tuple[POI, ...]:
        return self._pois

    def replace(self, pois: Iterable[POI]) -> None:
        with self._write_lock:
            self._pois = tuple(pois)
            self.loaded_at = utcnow()
        logger.info("Catalog refreshed with %s POIs", len(self._pois))

    def load(self, path: os.PathLike[str] | str | None = None) -> int:
        pois = load_catalog_file(path)
        self.replace(pois)
        return len(pois)

    def get(self, code: str) -> Optional[POI]:
        for poi in self._pois:
            if poi.code == code:
                return poi
        return None
