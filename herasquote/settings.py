"""Application settings using pydantic-settings.

All configuration is centralized here. Values can be overridden
via environment variables prefixed with ``HERASQUOTE_``.

Example:
    export HERASQUOTE_DEMO_PIN=4321
    export HERASQUOTE_GEOCODER_TIMEOUT_S=5
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Heras quote application settings."""

    model_config = SettingsConfigDict(
        env_prefix="HERASQUOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Access gate
    demo_pin: str = "1234"
    auth_cookie: str = "heras_demo_authed"
    session_cookie: str = "heras_session"
    # Least recently used sessions beyond this are evicted
    max_sessions: int = 1000

    # Geocoding (Nominatim)
    geocoder_url: str = "https://nominatim.openstreetmap.org"
    geocoder_user_agent: str = "herasquote/0.1.0"
    geocoder_country_codes: str = "gb"
    # None disables the transport timeout entirely
    geocoder_timeout_s: Optional[float] = 10.0

    # Map
    map_zoom: int = 14
    map_enabled: bool = True

    # CORS origins (comma-separated in env var)
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
