"""The routing surface of the workflow entry point.

A route names the workflow and a few options:

- `workflowId`  - which progress record applies; also selects the page set
- `exitTo`      - destination after completion or first-page back
- `persist`     - `"0"` disables persistence; anything else (or nothing) enables it
- `firstBackTo` - destination for `back` on the first page only

Both the camelCase names used by deep links and snake_case names are accepted.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_WORKFLOW_ID = "demo"
PERSISTENCE_DISABLED_VALUE = "0"


class WorkflowRoute(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    workflow_id: str = Field(
        default=DEFAULT_WORKFLOW_ID,
        validation_alias=AliasChoices("workflow_id", "workflowId"),
    )
    exit_to: str | None = Field(
        default=None,
        validation_alias=AliasChoices("exit_to", "exitTo"),
    )
    persist: str | None = None
    first_back_to: str | None = Field(
        default=None,
        validation_alias=AliasChoices("first_back_to", "firstBackTo"),
    )

    @field_validator("workflow_id", mode="before")
    @classmethod
    def _default_workflow_id(cls, value: object) -> object:
        return DEFAULT_WORKFLOW_ID if value is None else value

    @field_validator("exit_to", "first_back_to", mode="before")
    @classmethod
    def _blank_is_missing(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def persistence_enabled(self) -> bool:
        return self.persist != PERSISTENCE_DISABLED_VALUE

    @classmethod
    def from_params(cls, params: Mapping[str, str | None]) -> WorkflowRoute:
        return cls.model_validate(dict(params))
