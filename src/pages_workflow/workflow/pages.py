"""Page contract between the engine and page content.

The engine only ever sees an ordered list of :class:`WorkflowPageDefinition`.
What a page renders to is up to the page set; the built-in sets render to
:class:`PageView`, a presentation-free description any UI can draw.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pydantic import BaseModel, Field

from .events import WorkflowSignal

Emit = Callable[[WorkflowSignal], Awaitable[None]]
Initializer = Callable[[], Awaitable[None] | None]


@dataclass(frozen=True, slots=True)
class WorkflowPageProps:
    """Everything a page gets from the engine.

    `emit` is the only way a page can request a transition.
    """

    emit: Emit
    is_initializing: bool


@dataclass(frozen=True, slots=True)
class WorkflowPageDefinition:
    id: str
    render: Callable[[WorkflowPageProps], object]
    initialize: Initializer | None = None


class PageView(BaseModel):
    page_id: str
    title: str
    step_label: str = ""
    description: str = ""
    can_go_back: bool = True
    is_initializing: bool = False
    actions: list[WorkflowSignal] = Field(
        default_factory=lambda: [WorkflowSignal.BACK, WorkflowSignal.NEXT]
    )
