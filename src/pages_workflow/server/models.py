"""Pydantic models for the REST server."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

from pages_workflow.workflow.pages import PageView

PhaseName = Literal["idle", "loading", "ready", "exited", "closed"]


class OpenSessionRequest(BaseModel):
    exit_to: str | None = Field(default=None, validation_alias=AliasChoices("exit_to", "exitTo"))
    persist: str | None = None
    first_back_to: str | None = Field(
        default=None, validation_alias=AliasChoices("first_back_to", "firstBackTo")
    )


class EventRequest(BaseModel):
    signal: str


class ApiSnapshot(BaseModel):
    workflow_id: str
    phase: PhaseName
    current_index: int
    total_pages: int
    page_id: str | None = None
    is_initializing: bool
    exit_target: str | None = None


class SessionResponse(BaseModel):
    session_id: str
    snapshot: ApiSnapshot
    view: PageView | None = None


class ProgressResponse(BaseModel):
    workflow_id: str
    progress: int
