"""Configuration for the workflow runner.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing is required: every setting has a local-first default, so a bare
checkout can run the demo workflow and keep its progress under
`workflow_state/`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkflowSettings(BaseSettings):
    """Settings for the workflow engine, host and CLI.

    Environment variables:
    - LOG_LEVEL                         (optional)
    - WORKFLOW_STORAGE_BACKEND          (optional, "file" or "memory")
    - WORKFLOW_STATE_PATH               (optional)
    - WORKFLOW_KEY_PREFIX               (optional)
    - WORKFLOW_DEFAULT_EXIT_TO          (optional)
    - WORKFLOW_DEMO_INIT_DELAY_SECONDS  (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `WorkflowSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    storage_backend: Literal["file", "memory"] = Field(
        default="file",
        validation_alias="WORKFLOW_STORAGE_BACKEND",
        description="Where progress records live: a JSON file, or process memory only",
    )

    workflow_state_path: Path = Field(
        default=Path("workflow_state/progress.json"),
        validation_alias="WORKFLOW_STATE_PATH",
        description="JSON file holding the persisted progress records",
    )

    key_prefix: str = Field(
        default="workflow_progress_",
        validation_alias="WORKFLOW_KEY_PREFIX",
        description="Prefix of every progress record key",
    )

    default_exit_to: str = Field(
        default="/(tabs)/(home)",
        validation_alias="WORKFLOW_DEFAULT_EXIT_TO",
        description="Destination used when a route does not name an exit target",
    )

    demo_init_delay_seconds: float = Field(
        default=0.15,
        ge=0.0,
        validation_alias="WORKFLOW_DEMO_INIT_DELAY_SECONDS",
        description="Simulated initializer latency of the demo pages",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def workflow_state_file(self) -> Path:
        """Path where workflow progress is persisted."""

        return self.workflow_state_path
