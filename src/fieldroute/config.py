"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Field Route Planner API"
    api_prefix: str = "/api"

    # Revisit cadence
    default_tier_revisit_days: dict[str, int] = Field(
        default={"A": 7, "B": 14, "C": 30},
        description="Revisit cadence used when a company has no tier_config.",
    )
    default_store_tier: str = Field(default="C", pattern="^[ABC]$")
    oos_revisit_days: int = Field(default=2, ge=1)
    low_stock_min_revisit_days: int = Field(default=3, ge=1)

    # Route timing
    route_day_start: str = Field(
        default="08:00",
        pattern=r"^\d{2}:\d{2}$",
        description="Clock time the first leg of every route starts at.",
    )
    average_speed_kmh: float = Field(default=25.0, gt=0.0)
    tier_visit_minutes: dict[str, int] = Field(default={"A": 30, "B": 20, "C": 15})
    default_visit_minutes: int = Field(default=15, ge=0)

    # Candidate selection
    nearby_radius_km: float = Field(default=2.0, ge=0.0)
    nearby_store_limit: int = Field(default=5, ge=0)
    nearby_tiers: tuple[str, ...] = Field(default=("A", "B"))

    # Ordering
    tie_break_epsilon_km: float = Field(
        default=0.05,
        ge=0.0,
        description="Distances within this margin of the nearest candidate count as a tie.",
    )
    two_opt_enabled: bool = False
    two_opt_max_iterations: int = Field(default=200, ge=0)

    waypoint_update_max_retries: int = Field(default=3, ge=1)

    manager_roles: tuple[str, ...] = Field(default=("admin", "area_manager", "regional_director"))
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for the manager dashboard (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("frontend_allowed_origins", "nearby_tiers", "manager_roles", mode="before")
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

    @field_validator("default_tier_revisit_days", "tier_visit_minutes", mode="before")
    @classmethod
    def _parse_tier_mapping_from_env(cls, value: Any) -> dict[str, int]:
        """Parse a tier mapping from a JSON object or ``A=7,B=14,C=30`` string."""
        if isinstance(value, dict):
            return {str(key).upper(): int(days) for key, days in value.items()}
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, dict):
                    return {str(key).upper(): int(days) for key, days in parsed.items()}
            except (json.JSONDecodeError, TypeError, ValueError):
                pass
            mapping: dict[str, int] = {}
            for item in value.split(","):
                if "=" not in item:
                    continue
                key, _, days = item.partition("=")
                mapping[key.strip().upper()] = int(days.strip())
            return mapping
        return value


settings = Settings()
