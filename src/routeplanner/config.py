"""Application configuration and settings management."""

from functools import lru_cache
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing or unusable."""


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTES_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Delivery Route Planner API"
    api_prefix: str = "/functions/v1"
    log_level: str = Field(default="INFO", description="Root logging level.")

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    depot_latitude: float = Field(
        default=40.7128,
        ge=-90.0,
        le=90.0,
        description="Latitude of the dispatch origin every route starts from.",
    )
    depot_longitude: float = Field(
        default=-74.0060,
        ge=-180.0,
        le=180.0,
        description="Longitude of the dispatch origin every route starts from.",
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used for slot inference and order windows.",
    )
    recent_routes_limit: int = Field(default=5, ge=1)
    cors_allowed_headers: tuple[str, ...] = Field(
        default=("authorization", "x-client-info", "apikey", "content-type"),
        description="Request headers accepted from browser clients (CORS).",
    )

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone '{value}'") from exc
        return value

    @field_validator("cors_allowed_headers", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def require_supabase(self) -> tuple[str, str]:
        """Return the Supabase URL and key, or fail loudly when either is absent."""
        missing = [
            name
            for name, value in (("supabase_url", self.supabase_url), ("supabase_key", self.supabase_key))
            if not value
        ]
        if missing:
            env_names = ", ".join(f"ROUTES_{name.upper()}" for name in missing)
            raise ConfigurationError(f"Supabase is not configured. Set {env_names}.")
        return self.supabase_url, self.supabase_key


@lru_cache()
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
