from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

from pages_workflow.config import WorkflowSettings
from pages_workflow.host.registry import PageSet, PageSetRegistry, default_registry
from pages_workflow.host.route import WorkflowRoute
from pages_workflow.workflow.engine import (
    AdvanceHook,
    ExitHook,
    WorkflowConfiguration,
    WorkflowEngine,
)
from pages_workflow.workflow.navigation import Navigator
from pages_workflow.workflow.progress import ProgressStore

logger = logging.getLogger(__name__)


class WorkflowHost:
    """The workflow entry point.

    Turns a route into a running engine: picks the page set, enters its
    context provider, builds the configuration and wires persistence.
    """

    def __init__(
        self,
        settings: WorkflowSettings,
        *,
        progress_store: ProgressStore,
        navigator: Navigator,
        registry: PageSetRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.progress_store = progress_store
        self.navigator = navigator
        self.registry = registry or default_registry()

    def configure(
        self, route: WorkflowRoute, page_set: PageSet, context: Any = None
    ) -> WorkflowConfiguration:
        return WorkflowConfiguration(
            workflow_id=route.workflow_id,
            pages=page_set.build_pages(self.settings, context),
            exit_target=route.exit_to or self.settings.default_exit_to,
            first_page_back_target=route.first_back_to,
            persistence_enabled=route.persistence_enabled,
        )

    @asynccontextmanager
    async def open(
        self,
        route: WorkflowRoute,
        *,
        on_advance: AdvanceHook | None = None,
        on_exit: ExitHook | None = None,
    ) -> AsyncIterator[WorkflowEngine]:
        """Start the workflow named by `route`; close it when the block ends."""

        page_set = self.registry.resolve(route.workflow_id)
        async with AsyncExitStack() as stack:
            context = None
            if page_set.provider is not None:
                context = await stack.enter_async_context(page_set.provider(self.settings))

            config = self.configure(route, page_set, context)
            engine = WorkflowEngine(
                config,
                navigator=self.navigator,
                progress_store=self.progress_store if config.persistence_enabled else None,
                on_advance=on_advance,
                on_exit=on_exit,
            )
            logger.info(
                "Opening workflow",
                extra={
                    "workflow_id": config.workflow_id,
                    "page_set": page_set.id,
                    "persistence_enabled": config.persistence_enabled,
                },
            )
            await engine.start()
            try:
                yield engine
            finally:
                await engine.close()
