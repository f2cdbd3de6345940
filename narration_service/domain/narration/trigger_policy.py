from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional


class TriggerDecision(str, Enum):
    FIRE = "fire"
    STILL_INSIDE = "still_inside"
    COOLING_DOWN = "cooling_down"


@dataclass
class TriggerState:
    """Per-visitor memory used to suppress repeated proximity narration.

    Keyed by POI code, which survives catalog reloads.
    """

    inside_poi_code: Optional[str] = None
    last_narrated_at: Dict[str, datetime] = field(default_factory=dict)


class EdgeTriggerPolicy:
    """Edge-triggered proximity policy with a re-entry cooldown.

    A POI fires when the visitor enters its radius, never while the visitor
    stays inside it. Leaving and re-entering fires again only once
    ``cooldown`` has passed since that POI was last narrated.
    """

    def __init__(self, cooldown_seconds: float = 300.0) -> None:
        if cooldown_seconds < 0:
            raise ValueError("cooldown_seconds must be non-negative")
        self.cooldown = timedelta(seconds=cooldown_seconds)

    def evaluate(self, state: TriggerState, poi_code: str, now: datetime) -> TriggerDecision:
        was_inside = state.inside_poi_code == poi_code
        state.inside_poi_code = poi_code
        if was_inside:
            return TriggerDecision.STILL_INSIDE

        last = state.last_narrated_at.get(poi_code)
        if last is not None and now - last < self.cooldown:
            return TriggerDecision.COOLING_DOWN
        return TriggerDecision.FIRE

    def leave(self, state: TriggerState) -> None:
        state.inside_poi_code = None

    def mark_narrated(self, state: TriggerState, poi_code: str, now: datetime) -> None:
        state.last_narrated_at[poi_code] = now
