"""Open workflow sessions of the REST server.

Sessions live in process memory only; the durable part of a workflow is its
progress record, so a restarted server simply resumes from there when the
client opens a new session.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from contextlib import AsyncExitStack
from dataclasses import dataclass

from pages_workflow.config import WorkflowSettings
from pages_workflow.host import PageSetRegistry, WorkflowHost, WorkflowRoute
from pages_workflow.workflow.engine import WorkflowEngine
from pages_workflow.workflow.navigation import RecordingNavigator
from pages_workflow.workflow.progress import ProgressStore

logger = logging.getLogger(__name__)


@dataclass
class WorkflowSession:
    session_id: str
    route: WorkflowRoute
    engine: WorkflowEngine
    navigator: RecordingNavigator
    stack: AsyncExitStack


class SessionStore:
    def __init__(
        self,
        settings: WorkflowSettings,
        progress_store: ProgressStore,
        *,
        max_sessions: int,
        registry: PageSetRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.progress_store = progress_store
        self.max_sessions = max_sessions
        self.registry = registry
        self._sessions: OrderedDict[str, WorkflowSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> WorkflowSession | None:
        return self._sessions.get(session_id)

    async def open(self, route: WorkflowRoute) -> WorkflowSession:
        navigator = RecordingNavigator()
        host = WorkflowHost(
            self.settings,
            progress_store=self.progress_store,
            navigator=navigator,
            registry=self.registry,
        )
        stack = AsyncExitStack()
        try:
            engine = await stack.enter_async_context(host.open(route))
        except BaseException:
            await stack.aclose()
            raise

        session = WorkflowSession(
            session_id=uuid.uuid4().hex,
            route=route,
            engine=engine,
            navigator=navigator,
            stack=stack,
        )
        self._sessions[session.session_id] = session

        while len(self._sessions) > self.max_sessions:
            oldest_id = next(iter(self._sessions))
            logger.info("Evicting oldest workflow session", extra={"session_id": oldest_id})
            await self.close(oldest_id)
        return session

    async def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        await session.stack.aclose()
        return True

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)
