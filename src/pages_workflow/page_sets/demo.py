"""Three-step demo workflow.

Every step waits a short, configurable delay on entry so the loading state of
the engine is visible end to end.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from pages_workflow.config import WorkflowSettings
from pages_workflow.workflow.pages import (
    Initializer,
    PageView,
    WorkflowPageDefinition,
    WorkflowPageProps,
)

DEMO_WORKFLOW_ID = "demo"
DEMO_TITLE = "Test workflow"

_STEPS: list[tuple[str, str]] = [
    ("demo-step-1", "First step. Press Next."),
    ("demo-step-2", "Second step. Press Next."),
    ("demo-step-3", "Last step. Press Next to leave."),
]


def _delay_initializer(delay_seconds: float) -> Initializer:
    async def initialize() -> None:
        await asyncio.sleep(delay_seconds)

    return initialize


def _step_renderer(
    page_id: str, number: int, description: str
) -> Callable[[WorkflowPageProps], PageView]:
    def render(props: WorkflowPageProps) -> PageView:
        return PageView(
            page_id=page_id,
            title=DEMO_TITLE,
            step_label=f"Step {number} of {len(_STEPS)}",
            description=description,
            can_go_back=True,
            is_initializing=props.is_initializing,
        )

    return render


def build_demo_pages(
    settings: WorkflowSettings, context: object = None
) -> list[WorkflowPageDefinition]:
    return [
        WorkflowPageDefinition(
            id=page_id,
            render=_step_renderer(page_id, number, description),
            initialize=_delay_initializer(settings.demo_init_delay_seconds),
        )
        for number, (page_id, description) in enumerate(_STEPS, start=1)
    ]
