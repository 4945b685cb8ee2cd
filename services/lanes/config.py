"""
Application configuration via pydantic-settings.
All config read from environment variables with sensible defaults for local dev.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # App
    app_name: str = "lane-options"
    app_version: str = "0.1.0"
    environment: str = Field(default="development", pattern=r"^(development|staging|production)$")
    debug: bool = False

    # Database
    # Required; the CLI exits with code 1 when unset
    database_url: str = ""
    city_query_row_limit: int = Field(default=1000, ge=1)

    # Sentry
    sentry_dsn: str = ""
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)

    # Overlay (corrections + blacklist)
    overlay_cache_ttl_s: float = Field(default=60.0, gt=0.0)

    # Generation
    options_per_side: int = Field(default=100, ge=1)
    standard_radius_mi: float = Field(default=100.0, gt=0.0)
    generation_deadline_s: float | None = Field(default=None, gt=0.0)

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}


settings = Settings()
