"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="MEDFINDER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "MedFinder Location API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Level applied to the medfinder logger hierarchy.")
    data_root: Path = Field(default=Path("data"), description="Root directory for file-backed session data.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase key used for catalog reads.",
    )
    shops_table: str = "shops"
    medicines_table: str = "medicines"

    # Reverse geocoding
    nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL of the Nominatim reverse-geocoding service.",
    )
    geocoder_user_agent: str = Field(
        default="MedFinder/1.0",
        description="Client identifier sent with every geocoding request.",
    )
    geocoder_language: str = "en"
    geocoder_zoom: int = Field(default=18, ge=0, le=18)
    geocoder_timeout_seconds: float = Field(default=10.0, gt=0.0)
    google_geocoding_api_key: Optional[str] = Field(
        default=None,
        description="Optional Google Geocoding API key; tried before Nominatim when set.",
    )
    google_geocoding_url: str = "https://maps.googleapis.com/maps/api/geocode/json"

    # Device position policy
    location_high_accuracy: bool = True
    location_timeout_seconds: float = Field(default=30.0, ge=15.0)
    location_maximum_age_seconds: float = Field(default=0.0, ge=0.0)

    # Retry policy for failed device requests
    location_max_attempts: int = Field(default=3, ge=1)
    location_backoff_seconds: float = Field(default=1.0, ge=0.0)
    location_backoff_max_seconds: float = Field(default=30.0, ge=0.0)

    # Client sessions
    session_backend: Literal["memory", "file"] = "memory"
    location_max_sessions: int = Field(default=1000, ge=1)

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
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

    @field_validator("google_geocoding_api_key", mode="before")
    @classmethod
    def _drop_placeholder_key(cls, value: Any) -> Optional[str]:
        """Treat blank values and the documentation placeholder as an unset key."""
        if value is None:
            return None
        text = str(value).strip()
        if not text or text.upper() == "YOUR_GOOGLE_API_KEY":
            return None
        return text


settings = Settings()
