from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Room Reservation API"

    # Rooms are provisioned once at startup with ids 1..room_count
    room_count: int = Field(10, ge=1)

    # Upper bound on a single reservation; there is no lower bound
    max_duration_minutes: int = Field(12 * 60, ge=1)

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]

    @property
    def max_duration_ms(self) -> int:
        return self.max_duration_minutes * 60_000


@lru_cache()
def get_settings() -> Settings:
    return Settings()
