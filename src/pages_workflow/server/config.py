"""Configuration for the REST server.

Engine, storage and page set options come from
:class:`pages_workflow.config.WorkflowSettings`; this only holds what is
specific to serving HTTP.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    # Dev-friendly CORS (Expo web / Vite). Override via WORKFLOW_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:8081,http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="WORKFLOW_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    max_sessions: int = Field(
        default=64,
        ge=1,
        validation_alias="WORKFLOW_MAX_SESSIONS",
        description="Open sessions kept at once; the oldest is closed when exceeded.",
    )

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", extra="ignore", populate_by_name=True
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
