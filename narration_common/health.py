from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class HealthState:
    service: str
    started_at: float = field(default_factory=time.monotonic)
    ready: bool = False
    message: Optional[str] = None

    def mark_ready(self) -> None:
        self.ready = True
        self.message = None

    def mark_not_ready(self, message: Optional[str] = None) -> None:
        self.ready = False
        self.message = message

    @property
    def uptime_seconds(self) -> float:
        return round(time.monotonic() - self.started_at, 2)

    def liveness_payload(self) -> dict:
        payload = {
            "service": self.service,
            "status": "ok",
            "uptime_seconds": self.uptime_seconds,
        }
        if self.message:
            payload["message"] = self.message
        return payload
