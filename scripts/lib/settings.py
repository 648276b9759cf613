"""
Environment configuration for the CRM Sales Metrics service.

Values come from the process environment and a project-root .env, read once
per process through pydantic-settings.

Usage:
    from scripts.lib.settings import get_settings
    settings = get_settings()
    settings.stage_counting_policy  # "current-state"
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import AliasChoices, Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scripts.lib.errors import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

STAGE_POLICIES = ("current-state", "event-log")


class Settings(BaseSettings):
    """
    Central configuration.

    - Reads from .env (project root) and the process environment.
    - Field names work as constructor arguments, env names as aliases.
    - Unknown env vars are ignored.
    """

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    # -------------------------------------------------------------------------
    # Document store
    # -------------------------------------------------------------------------
    supabase_url: str = Field(default="", alias="SUPABASE_URL")
    supabase_key: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_KEY"),
    )

    leads_table: str = Field(default="crm_leads", alias="LEADS_TABLE")
    activities_table: str = Field(default="crm_lead_activities", alias="ACTIVITIES_TABLE")
    config_table: str = Field(default="crm_config", alias="CONFIG_TABLE")
    goals_table: str = Field(default="seller_goals", alias="GOALS_TABLE")

    # Leads column holding the seller name ("vendedor" on legacy tables)
    seller_column: str = Field(default="seller", alias="SELLER_COLUMN")

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------
    stage_counting_policy: str = Field(default="current-state", alias="STAGE_COUNTING_POLICY")
    team_sentinel: str = Field(default="team", alias="TEAM_SENTINEL")
    team_display_name: str = Field(default="Whole Team", alias="TEAM_DISPLAY_NAME")
    no_seller_sentinel: str = Field(default="Unassigned", alias="NO_SELLER_SENTINEL")
    strict_metrics: bool = Field(default=False, alias="STRICT_METRICS")

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------
    # CORS_ORIGINS=http://a.example,http://b.example
    cors_origins_raw: str = Field(default="*", alias="CORS_ORIGINS")
    port: int = Field(default=3000, alias="DASHBOARD_PORT")

    @field_validator("stage_counting_policy", mode="before")
    @classmethod
    def known_policy(cls, value):
        policy = str(value).strip().lower()
        if policy not in STAGE_POLICIES:
            raise ConfigError(
                f"STAGE_COUNTING_POLICY must be one of {', '.join(STAGE_POLICIES)}, got '{value}'",
                variable="STAGE_COUNTING_POLICY",
            )
        return policy

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_origins_raw.split(",") if o.strip()]

    @classmethod
    def from_env(cls) -> "Settings":
        """Load from the environment, turning field errors into ConfigError."""
        try:
            return cls()
        except PydanticValidationError as e:
            first = e.errors()[0]
            variable = ".".join(str(part) for part in first.get("loc", ())) or None
            raise ConfigError(f"Invalid configuration: {first.get('msg')}", variable=variable) from e


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader so config is evaluated once per process."""
    return Settings.from_env()
