"""Page set registry.

Workflow ids select a page set by exact match. Ids that match nothing get the
default (demo) set: a malformed deep link should show a harmless demo, not
crash the entry point.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any

from pages_workflow.config import WorkflowSettings
from pages_workflow.page_sets import (
    DEMO_WORKFLOW_ID,
    SELLER_ONBOARDING_WORKFLOW_ID,
    build_demo_pages,
    build_seller_onboarding_pages,
    seller_onboarding_provider,
)
from pages_workflow.workflow.pages import WorkflowPageDefinition

logger = logging.getLogger(__name__)

PageBuilder = Callable[[WorkflowSettings, Any], list[WorkflowPageDefinition]]
ContextProvider = Callable[[WorkflowSettings], AbstractAsyncContextManager[Any]]


@dataclass(frozen=True, slots=True)
class PageSet:
    """A named page list plus the optional context its pages run inside."""

    id: str
    build_pages: PageBuilder
    provider: ContextProvider | None = None


class PageSetRegistry:
    def __init__(self, page_sets: Iterable[PageSet], *, default_id: str) -> None:
        self._page_sets: dict[str, PageSet] = {}
        for page_set in page_sets:
            if page_set.id in self._page_sets:
                raise ValueError(f"Duplicate page set id: {page_set.id!r}")
            self._page_sets[page_set.id] = page_set
        if default_id not in self._page_sets:
            raise ValueError(f"Default page set {default_id!r} is not registered")
        self.default_id = default_id

    def __contains__(self, workflow_id: object) -> bool:
        return workflow_id in self._page_sets

    def ids(self) -> list[str]:
        return list(self._page_sets)

    @property
    def default(self) -> PageSet:
        return self._page_sets[self.default_id]

    def resolve(self, workflow_id: str) -> PageSet:
        page_set = self._page_sets.get(workflow_id)
        if page_set is not None:
            return page_set
        logger.warning(
            "Unknown workflow id, falling back to the default page set",
            extra={"workflow_id": workflow_id, "page_set": self.default_id},
        )
        return self.default


def default_registry() -> PageSetRegistry:
    return PageSetRegistry(
        [
            PageSet(id=DEMO_WORKFLOW_ID, build_pages=build_demo_pages),
            PageSet(
                id=SELLER_ONBOARDING_WORKFLOW_ID,
                build_pages=build_seller_onboarding_pages,
                provider=seller_onboarding_provider,
            ),
        ],
        default_id=DEMO_WORKFLOW_ID,
    )
