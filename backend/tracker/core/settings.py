from __future__ import annotations

import json
from functools import lru_cache
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, DotEnvSettingsSource, EnvSettingsSource, SettingsConfigDict


_COMMA_SEPARATED_FIELDS = {"allow_origins", "live_tracking_roles"}


class _CommaSeparatedListsMixin:
    """Accept comma-separated values for list fields instead of strict JSON."""

    def decode_complex_value(self, field_name, field, value):  # type: ignore[override]
        try:
            return super().decode_complex_value(field_name, field, value)  # type: ignore[misc]
        except json.JSONDecodeError:
            if field_name in _COMMA_SEPARATED_FIELDS:
                return value
            raise


class _EnvSource(_CommaSeparatedListsMixin, EnvSettingsSource):
    pass


class _DotEnvSource(_CommaSeparatedListsMixin, DotEnvSettingsSource):
    pass


def _split_csv(value: str | List[str]) -> List[str]:
    if isinstance(value, list):
        return [item.strip() for item in value if item and item.strip()]
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    project_name: str = "Tracker Insights API"
    project_version: str = "1.0.0"
    environment: str = Field(
        default="development",
        description="Deployment environment name",
        validation_alias=AliasChoices("ENV", "ENVIRONMENT"),
    )
    git_sha: str | None = Field(default=None, description="Git SHA for /version")
    build_version: str | None = Field(default=None, description="Build identifier")
    log_level: str = Field(default="INFO", description="Logging level")

    # Database
    database_url: str = Field(
        default="postgresql+psycopg2://postgres@localhost:5432/tracker",
        description="SQLAlchemy database URL",
    )
    db_pool_size: int = Field(default=5, description="Base DB connection pool size")
    db_max_overflow: int = Field(default=10, description="Additional DB connections beyond pool size")
    db_pool_timeout: int = Field(default=30, description="Seconds to wait for a DB connection")
    db_pool_recycle: int = Field(default=1800, description="Recycle DB connections after N seconds")
    db_read_only: bool = Field(
        default=True,
        description="Open Postgres sessions read-only; migrations use their own engine",
        validation_alias=AliasChoices("TRACKER_DB_READ_ONLY", "DB_READ_ONLY"),
    )
    migration_database_url: str | None = Field(
        default=None,
        description="Owner connection used by Alembic when the service URL is read-only",
        validation_alias=AliasChoices("MIGRATION_DATABASE_URL"),
    )

    # Auth / JWT (tokens are issued by the auth service, only verified here)
    jwt_secret: str = Field(default="change_me", description="JWT signing secret")
    algorithm: str = Field(default="HS256", description="JWT signing algorithm")

    # CORS
    allow_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

    # Tracker read models
    timezone: str = Field(
        default="UTC",
        description="Canonical timezone used to derive the 'today' date bucket",
        validation_alias=AliasChoices("TRACKER_TIMEZONE", "TIMEZONE"),
    )
    search_limit: int = Field(
        default=50,
        description="Maximum rows returned by the file search",
        validation_alias=AliasChoices("TRACKER_SEARCH_LIMIT", "SEARCH_LIMIT"),
    )
    live_tracking_roles: List[str] = Field(
        default_factory=lambda: ["admin", "superadmin", "super admin"],
        description="Roles allowed to view live tracking and other users' dashboards",
        validation_alias=AliasChoices("TRACKER_LIVE_TRACKING_ROLES", "LIVE_TRACKING_ROLES"),
    )

    @field_validator("allow_origins", mode="before")
    @classmethod
    def parse_allow_origins(cls, value: str | List[str]) -> List[str]:
        origins = _split_csv(value) if value else []
        if origins:
            return origins
        return [
            "http://localhost",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]

    @field_validator("live_tracking_roles", mode="before")
    @classmethod
    def parse_live_tracking_roles(cls, value: str | List[str]) -> List[str]:
        return [role.lower() for role in _split_csv(value or [])]

    @field_validator("timezone")
    @classmethod
    def normalize_timezone(cls, value: str) -> str:
        name = (value or "").strip()
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            return "UTC"
        return name

    @field_validator("search_limit")
    @classmethod
    def clamp_search_limit(cls, value: int) -> int:
        return value if value > 0 else 50

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            _EnvSource(settings_cls),
            _DotEnvSource(settings_cls),
            file_secret_settings,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
