"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from pantry_keeper.domain.recommendations import SelectionMode

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_key: str
    environment: str = _ENVIRONMENT
    log_level: str = "INFO"
    recommendation_top_n: int = 3
    recommendation_mode: str = SelectionMode.RANKED.value
    variety_pool_size: int = 5
    variety_max_picks: int = 2
    recommendation_seed: int | None = None

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_recommendation_mode(raw: str | None) -> SelectionMode:
    """Parse the selection mode, defaulting to deterministic ranking."""
    if raw is None:
        return SelectionMode.RANKED
    cleaned = raw.strip().lower()
    for mode in SelectionMode:
        if mode.value == cleaned:
            return mode
    return SelectionMode.RANKED
