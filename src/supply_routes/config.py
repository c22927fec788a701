"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SUPPLY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Supply Route Allocation API"
    api_prefix: str = "/api"
    default_source: str = Field(default="Mandya", description="Source location the planner starts with.")
    default_total_supply: float = Field(default=5000.0, ge=0.0, description="Initial total supply (kg).")
    distance_provider: Literal["matrix", "predefined"] = Field(
        default="predefined",
        description="Distance backend: the HTTP distance matrix API or the built-in distance table.",
    )
    distance_api_base_url: str = Field(
        default="https://maps.gomaps.pro/maps/api",
        description="Base URL of a Google-compatible Distance Matrix API.",
    )
    distance_api_key: Optional[str] = Field(
        default=None,
        description="API key sent with every distance matrix request.",
    )
    distance_mode: Literal["driving", "walking", "bicycling", "transit"] = Field(default="driving")
    distance_units: Literal["metric", "imperial"] = Field(default="metric")
    distance_timeout_seconds: float = Field(default=15.0, gt=0.0)
    distance_max_retries: int = Field(default=2, ge=0)
    distance_backoff_seconds: float = Field(default=0.5, ge=0.0)
    average_speed_kmh: float = Field(
        default=40.0,
        gt=0.0,
        description="Speed used to estimate durations for the built-in distance table.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
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

    @model_validator(mode="after")
    def _require_api_key_for_matrix(self) -> "Settings":
        if self.distance_provider == "matrix" and not self.distance_api_key:
            raise ValueError("SUPPLY_DISTANCE_API_KEY must be set when SUPPLY_DISTANCE_PROVIDER is 'matrix'.")
        return self


settings = Settings()
