"""
Application configuration via environment variables.

Everything here is resolved once at startup and never changes afterwards.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "catscii"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"

    # TheCatAPI
    cat_api_url: str = "https://api.thecatapi.com/v1/images/search"
    thecatapi_key: str = ""
    user_agent: str = f"catscii/{__version__}"
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)

    # Rendering (fixed per process, never taken from the request)
    art_columns: int = Field(default=80, ge=1, le=400)
    glyph_ramp: str = Field(default=" .:-=+*#%@", min_length=1)
    char_aspect: float = Field(default=0.5, gt=0)
    art_max_rows: int = Field(default=320, ge=1)

    # Cache
    freshness_seconds: float = Field(default=30.0, ge=0)
    serve_stale_on_error: bool = True
    stale_if_error_seconds: float = Field(default=300.0, ge=0)
    # 0 disables the background pre-warm task
    prewarm_interval_seconds: float = Field(default=0.0, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
