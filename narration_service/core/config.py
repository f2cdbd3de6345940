import json
from typing import Annotated, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from narration_service.domain.narration.models import ContentType


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Vinh Khanh Narration API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    CATALOG_PATH: Optional[str] = None

    PROXIMITY_RADIUS_M: float = 10.0
    RETRIGGER_COOLDOWN_SECONDS: float = 300.0
    DEFAULT_CONTENT_TYPE: ContentType = ContentType.AUDIO

    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    @field_validator("PROXIMITY_RADIUS_M", "RETRIGGER_COOLDOWN_SECONDS")
    @classmethod
    def non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be non-negative")
        return v


settings = Settings()
