"""Service settings read from the environment."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_CONFIRM_WINDOW_SECONDS = 30
MAX_CONFIRM_WINDOW_SECONDS = 180


class Settings(BaseSettings):
    """Top-level settings; each field is read from the upper-cased env var."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./nanny_match.db"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "info"
    cors_origin: str = "http://localhost:5175"
    match_batch_limit: int = Field(default=30, ge=1)
    default_confirm_window_seconds: int = Field(
        default=90, ge=MIN_CONFIRM_WINDOW_SECONDS, le=MAX_CONFIRM_WINDOW_SECONDS
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().lower()


@lru_cache()
def get_settings() -> Settings:
    return Settings()
