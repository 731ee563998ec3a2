from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Any
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, AnyUrl, AliasChoices, field_validator


class Settings(BaseSettings):
    # Where to read .env from; unknown keys are rejected to catch typos
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="forbid",
    )

    # General
    APP_NAME: str = "ClassQuiz Backend"
    API_V1_PREFIX: str = "/api/v1"
    APP_ENV: str = Field(
        "dev",
        validation_alias=AliasChoices("APP_ENV", "app_env"),
        description="Application environment: dev|staging|prod",
    )
    LOG_LEVEL: str = Field(
        "INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
    )

    BACKEND_PORT: int = Field(
        8000,
        validation_alias=AliasChoices("BACKEND_PORT", "app_port"),
        description="Backend port to bind",
    )

    # Supabase: document store and identity provider
    SUPABASE_URL: AnyUrl = Field(
        ...,
        validation_alias=AliasChoices("SUPABASE_URL", "supabase_url"),
        description="Your Supabase project URL",
    )
    SUPABASE_SERVICE_ROLE_KEY: str = Field(
        ...,
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "supabase_service_role_key"),
        description="Service role key (server-side)",
    )
    SUPABASE_ANON_KEY: str | None = Field(
        None,
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "supabase_anon_key"),
        description="Public anon key (optional server-side)",
    )

    # Redis carries leaderboard/live-status notifications; unset means in-process only
    REDIS_URL: str | None = Field(
        None,
        validation_alias=AliasChoices("REDIS_URL", "redis_url"),
        description="redis:// or rediss:// URL for notification fan-out",
    )
    EVENTS_CHANNEL: str = "classquiz:events"

    LEADERBOARD_LIMIT: int = Field(100, ge=1)

    FRONTEND_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    @field_validator("FRONTEND_ORIGINS", mode="before")
    @classmethod
    def _parse_origins(cls, v: Any) -> Any:
        """
        Accepts FRONTEND_ORIGINS in .env as:
        - a JSON array: ["http://localhost:5173","http://localhost:3000"]
        - a comma separated string: http://localhost:5173,http://localhost:3000
        - or with ; as the separator
        """
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                import json
                try:
                    return json.loads(s)
                except ValueError:
                    # malformed JSON, fall back to splitting
                    pass
            return [item.strip().strip('"') for item in s.strip("[]").replace(";", ",").split(",") if item.strip()]
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
