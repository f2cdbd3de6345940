import math
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from narration_service.domain.narration import (
    EARTH_RADIUS_M,
    POI,
    Content,
    ContentType,
    GeoLocation,
    Language,
    NarrationEngine,
    POIType,
)
from narration_service.services import POICatalog

ORIGIN = GeoLocation(10.7610, 106.7030)


def north_of(origin: GeoLocation, meters: float) -> GeoLocation:
    """Point ``meters`` due north; along a meridian haversine equals R * dphi."""
    return GeoLocation(origin.latitude + math.degrees(meters / EARTH_RADIUS_M), origin.longitude)


def make_content(language=Language.VIETNAMESE, content_type=ContentType.AUDIO, *, active=True, title=None):
    return Content(
        language=language,
        type=content_type,
        title=title or f"{language.value}-{content_type.value}",
        audio_url=f"https://media.example/{language.value}.mp3",
        is_active=active,
    )


def make_poi(code, location, *, contents=None, active=True, poi_type=POIType.RESTAURANT):
    return POI(
        code=code,
        type=poi_type,
        name=f"POI {code}",
        location=location,
        contents=list(contents if contents is not None else [make_content(), make_content(Language.ENGLISH)]),
        is_active=active,
    )


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def street():
    """Two POIs 100m apart on a north-south line, plus an inactive one at the origin."""
    return {
        "a": make_poi("VK-A", ORIGIN),
        "b": make_poi("VK-B", north_of(ORIGIN, 100)),
        "closed": make_poi("VK-X", north_of(ORIGIN, 2), active=False),
    }


@pytest.fixture
def catalog(street) -> POICatalog:
    return POICatalog([street["closed"], street["a"], street["b"]])


@pytest.fixture
def engine(catalog, clock) -> NarrationEngine:
    return NarrationEngine(catalog, max_distance_m=10.0, retrigger_cooldown_s=300.0, clock=clock)
